from __future__ import annotations

from pydantic import BaseModel, Field


class DomainRequest(BaseModel):
    type: str = "fc"
    user: str = Field(..., description="Account id")
    region: str
    service: str
    function: str = "auto"


class DomainResponse(BaseModel):
    domain: str
