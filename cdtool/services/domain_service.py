from __future__ import annotations

import json
import logging
from http import HTTPStatus

import aiohttp

from cdtool.models.domain import DomainRequest, DomainResponse
from cdtool.services.config import DomainConfig

logger = logging.getLogger(__name__)


class DomainServiceError(RuntimeError):
    pass


class DomainService:
    """Client for the external service that hands out generated function domains."""

    def __init__(self, config: DomainConfig, *, session: aiohttp.ClientSession) -> None:
        self._config = config
        self._session = session

    async def get(self, request: DomainRequest) -> str:
        """Allocate (or look up) the generated domain for ``request``; returns a bare host name."""

        timeout = aiohttp.ClientTimeout(total=self._config.timeout_seconds)
        try:
            async with self._session.post(
                self._config.service_url,
                json=request.model_dump(),
                headers={"Accept": "application/json"},
                timeout=timeout,
            ) as resp:
                status = resp.status
                payload = await resp.read()
        except aiohttp.ClientError as exc:
            logger.exception("Domain request failed (service=%s)", request.service)
            raise DomainServiceError("Domain allocation request failed") from exc

        if status != HTTPStatus.OK:
            try:
                details = payload.decode("utf-8") if payload else ""
            except Exception:
                details = ""
            raise DomainServiceError(f"Domain allocation failed: HTTP {status} {details}".strip())

        try:
            parsed = DomainResponse.model_validate(json.loads(payload.decode("utf-8")))
        except Exception as exc:
            raise DomainServiceError("Unexpected domain allocation response") from exc

        return parsed.domain
