"""Tests for domain resolution."""

from unittest.mock import AsyncMock

import pytest

from cdtool.models.domain import DomainRequest
from cdtool.services.setup.domain_setup_service import DomainSetupService, strip_scheme


@pytest.mark.asyncio
async def test_scheme_is_stripped_without_remote_call(env_config):
    domain = AsyncMock()
    env_config["DOMAIN"] = "https://example.com"

    resolved = await DomainSetupService(domain=domain).resolve(env_config, service_name="serverless-cd")

    assert resolved == "example.com"
    domain.get.assert_not_called()


@pytest.mark.asyncio
async def test_bare_domain_passes_through(env_config):
    env_config["DOMAIN"] = "cd.example.com"

    assert await DomainSetupService().resolve(env_config, service_name="serverless-cd") == "cd.example.com"


@pytest.mark.asyncio
async def test_auto_allocates_exactly_once(env_config):
    domain = AsyncMock()
    domain.get.return_value = "auto.fc.devsapp.net"

    resolved = await DomainSetupService(domain=domain).resolve(env_config, service_name="my-service")

    assert resolved == "auto.fc.devsapp.net"
    domain.get.assert_awaited_once_with(
        DomainRequest(type="fc", user="1234567890", region="cn-hangzhou", service="my-service", function="auto")
    )


def test_strip_scheme():
    assert strip_scheme("http://a.b.c/") == "a.b.c"
    assert strip_scheme("a.b.c") == "a.b.c"
