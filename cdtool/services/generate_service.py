from __future__ import annotations

import logging
from typing import Callable, Mapping

from cdtool.models.generate import GenerateResult
from cdtool.services.setup.domain_setup_service import DomainSetupService
from cdtool.services.setup.oss_setup_service import OssSetupService
from cdtool.services.setup.tablestore_setup_service import TablestoreSetupService

logger = logging.getLogger(__name__)

OssSetupFactory = Callable[[Mapping[str, str]], OssSetupService]
TablestoreSetupFactory = Callable[[Mapping[str, str]], TablestoreSetupService]


class GenerateService:
    """Bring-up in dependency order: bucket, then domain, then database.

    The first failure aborts the remaining steps. Values resolved by a step are
    written into a copy of the config that is handed to the next step and returned.
    """

    def __init__(
        self,
        *,
        oss_setup_factory: OssSetupFactory,
        domain_setup: DomainSetupService,
        tablestore_setup_factory: TablestoreSetupFactory,
    ) -> None:
        self._oss_setup_factory = oss_setup_factory
        self._domain_setup = domain_setup
        self._tablestore_setup_factory = tablestore_setup_factory

    async def generate(self, env_config: Mapping[str, str], *, service_name: str) -> GenerateResult:
        config = dict(env_config)

        logger.info("Generate bucket resource start...")
        bucket = await self._oss_setup_factory(config).setup_bucket()
        config["OSS_BUCKET"] = bucket.bucket_name
        logger.info("Generate bucket resource success")

        logger.info("Generate domain resource start")
        config["DOMAIN"] = await self._domain_setup.resolve(config, service_name=service_name)
        logger.info("Generate domain resource success")

        logger.info("Generate ots resource start")
        await self._tablestore_setup_factory(config).init()
        logger.info("Generate ots resource success")

        return GenerateResult(bucket_name=bucket.bucket_name, domain=config["DOMAIN"], env_config=config)
