"""Test configuration and fixtures."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

import pytest

from cdtool.services.config import Credentials, OtsAccess, TablestoreConfig, synthesize_env_config
from cdtool.services.setup.tablestore_setup_service import TablestoreSetupService
from cdtool.services.tablestore_service import TablestoreNetworkingError, TablestoreServiceError


def not_found() -> TablestoreServiceError:
    return TablestoreServiceError("not found", code=404, status=404)


@dataclass
class FakeRemote:
    """In-memory stand-in for the wide-column provider shared by every client."""

    tables: set[str] = field(default_factory=set)
    indexes: set[tuple[str, str]] = field(default_factory=set)
    calls: list[tuple[str, ...]] = field(default_factory=list)
    failing_deletes: set[tuple[str, str]] = field(default_factory=set)
    describe_errors: dict[str, Exception] = field(default_factory=dict)

    def count(self, action: str) -> int:
        return sum(1 for call in self.calls if call[0] == action)

    def names(self, action: str) -> list[str]:
        return [call[1] for call in self.calls if call[0] == action]


class FakeTablestoreClient:
    def __init__(self, remote: FakeRemote, config: TablestoreConfig, *, dns_broken: bool = False) -> None:
        self.remote = remote
        self.config = config
        self.dns_broken = dns_broken

    def _check_dns(self) -> None:
        if self.dns_broken:
            raise TablestoreNetworkingError(f"getaddrinfo ENOTFOUND {self.config.endpoint}")

    async def describe_table(self, *, table_name: str) -> dict[str, Any]:
        self._check_dns()
        self.remote.calls.append(("describe_table", table_name, self.config.access.value))
        if table_name in self.remote.describe_errors:
            raise self.remote.describe_errors[table_name]
        if table_name not in self.remote.tables:
            raise not_found()
        return {"tableMeta": {"tableName": table_name}}

    async def create_table(self, params: dict[str, Any]) -> dict[str, Any]:
        self._check_dns()
        name = params["tableMeta"]["tableName"]
        self.remote.calls.append(("create_table", name, self.config.access.value))
        self.remote.tables.add(name)
        return {}

    async def delete_table(self, *, table_name: str) -> dict[str, Any]:
        self.remote.calls.append(("delete_table", table_name))
        if ("table", table_name) in self.remote.failing_deletes:
            raise TablestoreServiceError("boom", code=500, status=500)
        self.remote.tables.discard(table_name)
        return {}

    async def describe_search_index(self, *, table_name: str, index_name: str) -> dict[str, Any]:
        self._check_dns()
        self.remote.calls.append(("describe_search_index", index_name))
        if (table_name, index_name) not in self.remote.indexes:
            raise not_found()
        return {}

    async def create_search_index(self, params: dict[str, Any]) -> dict[str, Any]:
        self._check_dns()
        self.remote.calls.append(("create_search_index", params["indexName"]))
        self.remote.indexes.add((params["tableName"], params["indexName"]))
        return {}

    async def delete_search_index(self, *, table_name: str, index_name: str) -> dict[str, Any]:
        self.remote.calls.append(("delete_search_index", table_name))
        if ("index", table_name) in self.remote.failing_deletes:
            raise TablestoreServiceError("boom", code=500, status=500)
        self.remote.indexes.discard((table_name, index_name))
        return {}


class FakeInstanceService:
    def __init__(self, *, exists: bool = False, get_error: Optional[Exception] = None) -> None:
        self.exists = exists
        self.get_error = get_error
        self.calls: list[str] = []
        self.delete_error: Optional[Exception] = None

    async def get_instance(self, *, instance_name: str) -> dict[str, Any]:
        self.calls.append("get")
        if self.get_error is not None:
            raise self.get_error
        if not self.exists:
            raise TablestoreServiceError("no instance", code="InstanceNotExist", status=404)
        return {"InstanceName": instance_name}

    async def insert_instance(self, *, instance_name: str, cluster_type: str = "HYBRID") -> dict[str, Any]:
        self.calls.append(f"insert:{cluster_type}")
        self.exists = True
        return {}

    async def delete_instance(self, *, instance_name: str) -> dict[str, Any]:
        self.calls.append("delete")
        if self.delete_error is not None:
            raise self.delete_error
        self.exists = False
        return {}


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(account_id="1234567890", access_key_id="ak-id", access_key_secret="ak-secret")


@pytest.fixture
def env_config(credentials: Credentials) -> dict[str, str]:
    return synthesize_env_config({}, credentials)


@pytest.fixture
def remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture
def instance() -> FakeInstanceService:
    return FakeInstanceService()


@pytest.fixture
def make_setup(env_config: dict[str, str], remote: FakeRemote, instance: FakeInstanceService):
    """Build a TablestoreSetupService over the fakes; ``broken_access`` lists families whose DNS fails."""

    def _make(*, broken_access: tuple[OtsAccess, ...] = ()) -> TablestoreSetupService:
        return TablestoreSetupService(
            env_config,
            instance=instance,  # type: ignore[arg-type]
            client_factory=lambda cfg: FakeTablestoreClient(  # type: ignore[return-value]
                remote, cfg, dns_broken=cfg.access in broken_access
            ),
            retry_delay_seconds=0,
        )

    return _make
