from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional


AUTO_BUCKET_SUFFIX = "serverless-cd"


def auto_bucket_name(*, account_id: str, region_name: str) -> str:
    """Deterministic bucket name used when the configured bucket is "auto"."""

    return f"{account_id}-{region_name}-{AUTO_BUCKET_SUFFIX}"


@dataclass(frozen=True)
class OssConfig:
    """Object-storage configuration; the provider speaks the S3 API."""

    bucket_name: str
    account_id: str
    region_name: str
    access_key_id: str
    access_key_secret: str
    endpoint_url: Optional[str] = None

    @property
    def is_auto_bucket(self) -> bool:
        return self.bucket_name == auto_bucket_name(account_id=self.account_id, region_name=self.region_name)

    @staticmethod
    def from_env_config(env_config: Mapping[str, str], *, bucket_name: Optional[str] = None) -> "OssConfig":
        region_name = env_config.get("REGION")
        if not region_name:
            raise ValueError("Missing required config value: REGION")

        endpoint_url = env_config.get("OSS_ENDPOINT_URL") or f"https://oss-{region_name}.aliyuncs.com"

        return OssConfig(
            bucket_name=bucket_name if bucket_name is not None else env_config.get("OSS_BUCKET", ""),
            account_id=env_config.get("ACCOUNTID", ""),
            region_name=region_name,
            access_key_id=env_config.get("ACCESS_KEY_ID", ""),
            access_key_secret=env_config.get("ACCESS_KEY_SECRET", ""),
            endpoint_url=endpoint_url,
        )
