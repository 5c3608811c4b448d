from __future__ import annotations

import os
from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class DomainConfig:
    """Configuration for the external domain-allocation service."""

    service_url: str
    _DEFAULT_SERVICE_URL: ClassVar[str] = "https://domain.devsapp.net/domain"
    _DEFAULT_TIMEOUT_SECONDS: ClassVar[float] = 30.0
    timeout_seconds: float = _DEFAULT_TIMEOUT_SECONDS

    @staticmethod
    def from_env() -> "DomainConfig":
        service_url = os.getenv("CDTOOL_DOMAIN_SERVICE_URL") or DomainConfig._DEFAULT_SERVICE_URL

        timeout_raw = os.getenv("CDTOOL_DOMAIN_TIMEOUT_SECONDS")
        timeout_seconds = DomainConfig._DEFAULT_TIMEOUT_SECONDS
        if timeout_raw:
            try:
                timeout_seconds = float(timeout_raw)
            except ValueError as exc:
                raise ValueError("Invalid CDTOOL_DOMAIN_TIMEOUT_SECONDS; must be a number") from exc

        return DomainConfig(service_url=service_url.rstrip("/"), timeout_seconds=timeout_seconds)
