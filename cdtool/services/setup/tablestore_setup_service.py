from __future__ import annotations

import json
import logging
from typing import Any, Awaitable, Callable, Mapping, Optional

from cdtool.services.config import OtsAccess, TablestoreConfig
from cdtool.services.retry import DEFAULT_RETRY_DELAY_SECONDS, retry_once
from cdtool.services.tablestore_schema import DbEntityDescriptor, build_db_entities
from cdtool.services.tablestore_service import (
    TablestoreInstanceService,
    TablestoreNetworkingError,
    TablestoreService,
    TablestoreServiceError,
)

logger = logging.getLogger(__name__)

TablestoreClientFactory = Callable[[TablestoreConfig], TablestoreService]


class TablestoreSetupService:
    """Provisioning helper for the wide-column database.

    Drives the instance, the four entity tables and their search indexes to
    "exists" (``init``) or "gone" (``remove_table`` / ``remove_instance``).

    Existence is always queried remotely right before a create decision; nothing is
    cached between calls, so re-running converges. The check-then-create sequence is
    not atomic: two concurrent runs can both see "not found" and both issue the
    create, in which case the provider rejects the loser and that error propagates.
    There is no local lock because nothing local owns the remote resource.
    """

    def __init__(
        self,
        env_config: Mapping[str, str],
        *,
        instance: TablestoreInstanceService,
        client_factory: TablestoreClientFactory,
        retry_delay_seconds: float = DEFAULT_RETRY_DELAY_SECONDS,
    ) -> None:
        self._env_config = env_config
        self._config = TablestoreConfig.from_env_config(env_config)
        self._instance = instance
        self._client_factory = client_factory
        self._retry_delay_seconds = retry_delay_seconds
        self._entities = build_db_entities(env_config)
        self._client = self._client_factory(self._config)

    @staticmethod
    def from_env_config(env_config: Mapping[str, str]) -> "TablestoreSetupService":
        config = TablestoreConfig.from_env_config(env_config)
        return TablestoreSetupService(
            env_config,
            instance=TablestoreInstanceService(config),
            client_factory=TablestoreService,
        )

    @property
    def entities(self) -> list[DbEntityDescriptor]:
        return list(self._entities)

    @property
    def access(self) -> OtsAccess:
        return self._config.access

    @property
    def endpoint(self) -> str:
        return self._config.endpoint

    def make_client(self, access: OtsAccess = OtsAccess.OTS) -> None:
        """Point the data-plane client at another endpoint family."""

        self._config = self._config.with_access(access)
        self._client = self._client_factory(self._config)
        logger.debug("Tablestore endpoint switched to %s", self._config.endpoint)

    # -----------------
    # Bring-up
    # -----------------

    async def init(self) -> None:
        """Ensure instance, then per entity: table, then its index."""

        await self.init_instance()

        for entity in self._entities:
            logger.debug("handler %s start", entity.name)
            table_params = entity.table_params(entity.name, self._env_config)
            try:
                await self.create_table(entity.name, table_params)
            except TablestoreNetworkingError as exc:
                if self._config.access is not OtsAccess.OTS:
                    raise
                logger.debug("handler table error: %s", exc)
                self.make_client(OtsAccess.TABLE_STORE)
                await self.create_table(entity.name, table_params)

            if entity.index_name:
                await self.create_index(
                    entity.name,
                    entity.index_name,
                    entity.index_params(entity.name, entity.index_name),
                )

            logger.debug("handler %s end", entity.name)

    async def init_instance(self) -> None:
        instance_name = self._config.instance_name
        logger.info("Init Ots Instance %s Start", instance_name)

        created = await self._ensure_exists(
            label=f"instance {instance_name}",
            describe=lambda: self._instance.get_instance(instance_name=instance_name),
            create=lambda: self._instance.insert_instance(instance_name=instance_name, cluster_type="HYBRID"),
        )
        if not created:
            logger.debug("Ots Instance %s Exist", instance_name)

        logger.info("Init Ots Instance %s Success", instance_name)

    async def create_table(self, table_name: str, params: dict[str, Any]) -> bool:
        """Create ``table_name`` unless it already exists. Returns True when created."""

        return await self._ensure_exists(
            label=f"table {table_name}",
            describe=lambda: self._client.describe_table(table_name=table_name),
            create=lambda: self._client.create_table(params),
            params=params,
        )

    async def create_index(self, table_name: str, index_name: str, params: dict[str, Any]) -> bool:
        """Create search index ``index_name`` on ``table_name`` unless it already exists."""

        return await self._ensure_exists(
            label=f"index {index_name}",
            describe=lambda: self._client.describe_search_index(table_name=table_name, index_name=index_name),
            create=lambda: self._client.create_search_index(params),
            params=params,
        )

    async def _ensure_exists(
        self,
        *,
        label: str,
        describe: Callable[[], Awaitable[Any]],
        create: Callable[[], Awaitable[Any]],
        params: Optional[dict[str, Any]] = None,
    ) -> bool:
        logger.debug("check %s", label)
        try:
            await describe()
            logger.debug("check %s exist, skip create", label)
            return False
        except TablestoreServiceError as exc:
            logger.debug("check %s error: %s", label, exc)
            if not exc.is_not_found:
                raise

        if params is not None:
            logger.debug("need create %s, params: %s", label, json.dumps(params, indent=2))
        await create()
        logger.debug("create %s success", label)
        return True

    # -----------------
    # Tear-down
    # -----------------

    async def remove_table(self) -> None:
        """Best-effort delete of every index and table; never stops early."""

        for entity in self._entities:
            if entity.index_name:
                await self._delete_quietly(
                    label=f"tableIndex {entity.name}: {entity.index_name}",
                    operation=lambda e=entity: self._client.delete_search_index(
                        table_name=e.name, index_name=e.index_name
                    ),
                )
            await self._delete_quietly(
                label=f"table {entity.name}",
                operation=lambda e=entity: self._client.delete_table(table_name=e.name),
            )

    async def remove_instance(self) -> None:
        instance_name = self._config.instance_name
        logger.info("Remove Ots Instance %s start...", instance_name)
        await self._instance.delete_instance(instance_name=instance_name)
        logger.info("Remove Ots Instance %s success", instance_name)

    async def _delete_quietly(self, *, label: str, operation: Callable[[], Awaitable[Any]]) -> None:
        logger.info("Remove %s start...", label)
        try:
            await retry_once(operation, delay_seconds=self._retry_delay_seconds)
        except Exception as exc:
            logger.warning("Remove %s failed, skipping: %s", label, exc)
            return
        logger.info("Remove %s success", label)
