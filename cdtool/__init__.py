"""serverless-cd resource tool.

Provisions (``generate``) and tears down (``remove``) the object-storage bucket,
wide-column database instance/tables/search indexes and function domain that a
serverless-cd deployment relies on.
"""
