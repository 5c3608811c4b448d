from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import ClassVar, Mapping


class OtsAccess(str, Enum):
    """Endpoint host families the wide-column data plane answers on."""

    OTS = "ots"
    TABLE_STORE = "tablestore"


@dataclass(frozen=True)
class TablestoreConfig:
    """Runtime configuration for the wide-column database (control and data plane).

    The data-plane endpoint is derived from the instance name, region and access
    family, e.g. "https://serverless-cd.cn-hangzhou.ots.aliyuncs.com". Switching
    family yields a new config; the rest of the fields stay the same.
    """

    instance_name: str
    region_name: str
    access_key_id: str
    access_key_secret: str
    access: OtsAccess = OtsAccess.OTS
    endpoint_suffix: str = "aliyuncs.com"
    api_version: str = "2016-06-20"
    _DEFAULT_TIMEOUT_SECONDS: ClassVar[float] = 30.0
    timeout_seconds: float = _DEFAULT_TIMEOUT_SECONDS

    @property
    def endpoint(self) -> str:
        return f"https://{self.instance_name}.{self.region_name}.{self.access.value}.{self.endpoint_suffix}"

    @property
    def control_domain(self) -> str:
        return f"ots.{self.region_name}.{self.endpoint_suffix}"

    def with_access(self, access: OtsAccess) -> "TablestoreConfig":
        return replace(self, access=access)

    @staticmethod
    def from_env_config(env_config: Mapping[str, str]) -> "TablestoreConfig":
        instance_name = env_config.get("OTS_INSTANCE_NAME") or "serverless-cd"
        region_name = env_config.get("REGION")
        if not region_name:
            raise ValueError("Missing required config value: REGION")

        timeout_raw = env_config.get("OTS_TIMEOUT_SECONDS")
        timeout_seconds = TablestoreConfig._DEFAULT_TIMEOUT_SECONDS
        if timeout_raw:
            try:
                timeout_seconds = float(timeout_raw)
            except ValueError as exc:
                raise ValueError("Invalid OTS_TIMEOUT_SECONDS; must be a number") from exc

        return TablestoreConfig(
            instance_name=instance_name,
            region_name=region_name,
            access_key_id=env_config.get("ACCESS_KEY_ID", ""),
            access_key_secret=env_config.get("ACCESS_KEY_SECRET", ""),
            endpoint_suffix=env_config.get("OTS_ENDPOINT_SUFFIX") or "aliyuncs.com",
            timeout_seconds=timeout_seconds,
        )
