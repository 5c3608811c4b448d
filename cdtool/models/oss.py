from __future__ import annotations

from pydantic import BaseModel, Field


class BucketResult(BaseModel):
    bucket_name: str = Field(..., description="Resolved bucket name")
    auto_created: bool = Field(False, description="Name was derived from account/region rather than user-supplied")
