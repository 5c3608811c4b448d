from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping

from cdtool.models.remove import RemoveOptions, ResourceType
from cdtool.services.deploy_service import DeployToolService
from cdtool.services.generate_service import OssSetupFactory, TablestoreSetupFactory

logger = logging.getLogger(__name__)


class RemoveError(RuntimeError):
    def __init__(self, failed: list[ResourceType]) -> None:
        super().__init__(f"Failed to remove resource type(s): {', '.join(t.value for t in failed)}")
        self.failed = failed


class RemoveService:
    """Tear-down of the selected resource types.

    Types run in the fixed order fc, ots, oss. Each type is isolated: a failure is
    logged and the next type still runs; ``RemoveError`` is raised at the end naming
    the types that failed. Function-compute failures are never counted.
    """

    def __init__(
        self,
        *,
        deploy: DeployToolService,
        oss_setup_factory: OssSetupFactory,
        tablestore_setup_factory: TablestoreSetupFactory,
    ) -> None:
        self._deploy = deploy
        self._oss_setup_factory = oss_setup_factory
        self._tablestore_setup_factory = tablestore_setup_factory

    async def remove(self, env_config: Mapping[str, str], options: RemoveOptions, *, manifest: Path) -> None:
        if ResourceType.FC in options.types and not manifest.exists():
            raise FileNotFoundError(f"yaml path {manifest} not exist")

        if not options.types:
            logger.warning("No resource type selected; pass --type or --all")
            return

        failed: list[ResourceType] = []
        for resource_type in ResourceType:
            if resource_type not in options.types:
                continue
            try:
                if resource_type is ResourceType.FC:
                    await self.remove_fc(manifest)
                elif resource_type is ResourceType.OTS:
                    await self.remove_ots(env_config, deep=options.deep)
                elif resource_type is ResourceType.OSS:
                    await self.remove_oss(env_config, deep=options.deep)
            except Exception:
                logger.exception("Remove %s resource failed", resource_type.value.upper())
                failed.append(resource_type)

        if failed:
            raise RemoveError(failed)

    async def remove_fc(self, manifest: Path) -> None:
        logger.info("Remove FC resource start...")
        try:
            await self._deploy.remove(manifest=manifest)
        except Exception as exc:
            logger.warning("Remove FC resource failed, ignoring: %s", exc)
            return
        logger.info("Remove FC resource success...")

    async def remove_ots(self, env_config: Mapping[str, str], *, deep: bool) -> None:
        ots = self._tablestore_setup_factory(env_config)
        logger.info("Remove OTS resource start...")
        await ots.remove_table()
        logger.info("Remove OTS resource success...")
        if deep:
            try:
                await ots.remove_instance()
            except Exception as exc:
                logger.warning("Remove OTS instance failed, ignoring: %s", exc)

    async def remove_oss(self, env_config: Mapping[str, str], *, deep: bool) -> None:
        logger.info("Remove OSS resource start...")
        await self._oss_setup_factory(env_config).remove_bucket(deep=deep)
        logger.info("Remove OSS resource success...")
