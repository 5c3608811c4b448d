"""Setup (provisioning) services.

Controllers that drive one kind of remote resource to "exists" or "gone": the
object-storage bucket, the wide-column database and the function domain.
"""
