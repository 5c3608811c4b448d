"""Tests for the generate orchestrator."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from cdtool.models.oss import BucketResult
from cdtool.services.generate_service import GenerateService


@pytest.fixture
def steps():
    order = []

    oss = AsyncMock()
    oss.setup_bucket.side_effect = lambda: order.append("oss") or BucketResult(
        bucket_name="1234567890-cn-hangzhou-serverless-cd", auto_created=True
    )

    domain = AsyncMock()

    async def resolve(env_config, *, service_name):
        order.append(("domain", env_config["OSS_BUCKET"], service_name))
        return "example.com"

    domain.resolve.side_effect = resolve

    ots = AsyncMock()
    ots.init.side_effect = lambda: order.append("ots")
    ots_factory = MagicMock(return_value=ots)

    service = GenerateService(
        oss_setup_factory=MagicMock(return_value=oss),
        domain_setup=domain,
        tablestore_setup_factory=ots_factory,
    )
    return service, order, ots, ots_factory


@pytest.mark.asyncio
async def test_steps_run_in_order_and_thread_results(steps, env_config):
    service, order, _, ots_factory = steps

    result = await service.generate(env_config, service_name="serverless-cd")

    assert order == ["oss", ("domain", "1234567890-cn-hangzhou-serverless-cd", "serverless-cd"), "ots"]
    assert result.bucket_name == "1234567890-cn-hangzhou-serverless-cd"
    assert result.domain == "example.com"
    assert result.env_config["OSS_BUCKET"] == result.bucket_name
    assert result.env_config["DOMAIN"] == "example.com"
    assert ots_factory.call_args.args[0]["DOMAIN"] == "example.com"
    # caller's config is left as-is
    assert env_config["OSS_BUCKET"] == "auto"


@pytest.mark.asyncio
async def test_failure_aborts_remaining_steps(steps, env_config):
    service, order, ots, _ = steps
    service._domain_setup.resolve.side_effect = RuntimeError("allocation failed")

    with pytest.raises(RuntimeError):
        await service.generate(env_config, service_name="serverless-cd")

    assert order == ["oss"]
    ots.init.assert_not_called()
