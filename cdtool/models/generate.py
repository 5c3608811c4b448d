from __future__ import annotations

from pydantic import BaseModel


class GenerateResult(BaseModel):
    bucket_name: str
    domain: str
    env_config: dict[str, str]
