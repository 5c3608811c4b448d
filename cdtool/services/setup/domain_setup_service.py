from __future__ import annotations

import logging
from typing import Mapping, Optional

from cdtool.models.domain import DomainRequest
from cdtool.services.config import is_auto
from cdtool.services.domain_service import DomainService

logger = logging.getLogger(__name__)


def strip_scheme(domain: str) -> str:
    """"https://example.com/" -> "example.com"; bare hosts pass through."""

    if "://" in domain:
        domain = domain.split("://", 1)[1]
    return domain.rstrip("/")


class DomainSetupService:
    """Resolves the host name the deployed function is reachable on."""

    def __init__(self, *, domain: Optional[DomainService] = None) -> None:
        self._domain = domain

    async def resolve(self, env_config: Mapping[str, str], *, service_name: str) -> str:
        configured = env_config.get("DOMAIN", "")

        if is_auto(configured):
            if self._domain is None:
                raise RuntimeError("A DomainService is required to allocate an auto domain")
            request = DomainRequest(
                user=env_config.get("ACCOUNTID", ""),
                region=env_config.get("REGION", ""),
                service=service_name,
                function="auto",
            )
            domain = strip_scheme(await self._domain.get(request))
            logger.info("Allocated domain %s", domain)
            return domain

        return strip_scheme(configured.strip())
