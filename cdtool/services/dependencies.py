from __future__ import annotations

import aiohttp

from cdtool.services.config import DomainConfig
from cdtool.services.deploy_service import DeployToolService
from cdtool.services.domain_service import DomainService
from cdtool.services.generate_service import GenerateService
from cdtool.services.remove_service import RemoveService
from cdtool.services.setup.domain_setup_service import DomainSetupService
from cdtool.services.setup.oss_setup_service import OssSetupService
from cdtool.services.setup.tablestore_setup_service import TablestoreSetupService


def get_domain_setup_service(session: aiohttp.ClientSession) -> DomainSetupService:
    return DomainSetupService(domain=DomainService(DomainConfig.from_env(), session=session))


def get_generate_service(session: aiohttp.ClientSession) -> GenerateService:
    """Provider wiring the bring-up controllers; the domain client shares ``session``."""

    return GenerateService(
        oss_setup_factory=OssSetupService,
        domain_setup=get_domain_setup_service(session),
        tablestore_setup_factory=TablestoreSetupService.from_env_config,
    )


def get_remove_service() -> RemoveService:
    return RemoveService(
        deploy=DeployToolService(),
        oss_setup_factory=OssSetupService,
        tablestore_setup_factory=TablestoreSetupService.from_env_config,
    )
