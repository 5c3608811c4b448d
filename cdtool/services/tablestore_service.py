from __future__ import annotations

import asyncio
import json
import logging
import socket
from http import HTTPStatus
from typing import Any, Callable, Optional, Union

from aliyunsdkcore.acs_exception.exceptions import ClientException, ServerException
from aliyunsdkcore.client import AcsClient
from aliyunsdkcore.request import CommonRequest
from tablestore import (
    CapacityUnit,
    FieldSchema,
    FieldSort,
    FieldType,
    OTSClient,
    OTSClientError,
    OTSServiceError,
    ReservedThroughput,
    SearchIndexMeta,
    Sort,
    SortOrder,
    TableMeta,
    TableOptions,
)

from cdtool.services.config import TablestoreConfig

logger = logging.getLogger(__name__)


# Provider error codes that mean "no such resource" regardless of HTTP status.
NOT_FOUND_CODES = frozenset({"OTSObjectNotExist", "InstanceNotExist", "OTSInstanceNotExist"})

# Fragments the transport puts in the message when the host name does not resolve.
_DNS_FAILURE_MARKERS = (
    "getaddrinfo",
    "Name or service not known",
    "nodename nor servname",
    "Failed to resolve",
    "NameResolutionError",
)


class TablestoreServiceError(RuntimeError):
    """Remote failure from the wide-column database.

    ``code`` is the provider error code when the response carries one, otherwise the
    HTTP status.
    """

    def __init__(self, message: str, *, code: Union[int, str, None] = None, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.code = code
        self.status = status

    @property
    def is_not_found(self) -> bool:
        return self.code == HTTPStatus.NOT_FOUND or self.status == HTTPStatus.NOT_FOUND or self.code in NOT_FOUND_CODES


class TablestoreNetworkingError(TablestoreServiceError):
    """The endpoint host could not be resolved."""


def _is_dns_failure(exc: BaseException) -> bool:
    seen: set[int] = set()
    pending: list[Optional[BaseException]] = [exc]
    while pending:
        current = pending.pop()
        if current is None or id(current) in seen:
            continue
        seen.add(id(current))
        if isinstance(current, socket.gaierror) or type(current).__name__ == "NameResolutionError":
            return True
        if any(marker in str(current) for marker in _DNS_FAILURE_MARKERS):
            return True
        reason = getattr(current, "reason", None)
        pending.extend(
            [current.__cause__, current.__context__, reason if isinstance(reason, BaseException) else None]
        )
    return False


class TablestoreInstanceService:
    """Control-plane calls: instance lookup, creation and deletion.

    Runs the blocking Alibaba Cloud RPC client in a worker thread.
    """

    def __init__(self, config: TablestoreConfig, *, client: Optional[AcsClient] = None) -> None:
        self._config = config
        self._client = client or AcsClient(
            config.access_key_id,
            config.access_key_secret,
            config.region_name,
            timeout=int(config.timeout_seconds),
        )

    def _request(self, action: str, params: dict[str, str], *, method: str) -> CommonRequest:
        request = CommonRequest()
        request.set_accept_format("json")
        request.set_domain(self._config.control_domain)
        request.set_method(method)
        request.set_protocol_type("https")
        request.set_version(self._config.api_version)
        request.set_action_name(action)
        for key, value in params.items():
            request.add_query_param(key, value)
        return request

    async def _call(self, action: str, params: dict[str, str], *, method: str) -> dict[str, Any]:
        request = self._request(action, params, method=method)
        try:
            payload = await asyncio.to_thread(self._client.do_action_with_exception, request)
        except ServerException as exc:
            raise TablestoreServiceError(
                f"Tablestore {action} failed: HTTP {exc.get_http_status()} {exc.get_error_code()} {exc.get_error_msg()}",
                code=exc.get_error_code() or exc.get_http_status(),
                status=exc.get_http_status(),
            ) from exc
        except ClientException as exc:
            if _is_dns_failure(exc):
                raise TablestoreNetworkingError(
                    f"Unable to resolve Tablestore control endpoint: {exc.get_error_msg()}",
                    code=exc.get_error_code(),
                ) from exc
            logger.exception("Tablestore %s request failed", action)
            raise TablestoreServiceError(
                f"Tablestore {action} request failed: {exc.get_error_msg()}",
                code=exc.get_error_code(),
            ) from exc

        try:
            return json.loads(payload.decode("utf-8")) if payload else {}
        except Exception:
            return {}

    async def get_instance(self, *, instance_name: str) -> dict[str, Any]:
        return await self._call("GetInstance", {"InstanceName": instance_name}, method="GET")

    async def insert_instance(self, *, instance_name: str, cluster_type: str = "HYBRID") -> dict[str, Any]:
        return await self._call(
            "InsertInstance",
            {"InstanceName": instance_name, "ClusterType": cluster_type},
            method="POST",
        )

    async def delete_instance(self, *, instance_name: str) -> dict[str, Any]:
        return await self._call("DeleteInstance", {"InstanceName": instance_name}, method="POST")


def table_request_from_params(params: dict[str, Any]) -> tuple[TableMeta, TableOptions, ReservedThroughput]:
    meta = params["tableMeta"]
    options = params.get("tableOptions") or {}
    capacity = (params.get("reservedThroughput") or {}).get("capacityUnit") or {}

    table_meta = TableMeta(
        meta["tableName"],
        [(pk["name"], pk["type"]) for pk in meta["primaryKey"]],
        [(column["name"], column["type"]) for column in meta.get("definedColumn", [])],
    )
    table_options = TableOptions(
        time_to_live=options.get("timeToLive", -1),
        max_version=options.get("maxVersions", 1),
    )
    reserved = ReservedThroughput(CapacityUnit(capacity.get("read", 0), capacity.get("write", 0)))
    return table_meta, table_options, reserved


def index_meta_from_params(params: dict[str, Any]) -> SearchIndexMeta:
    schema = params["schema"]
    fields = [
        FieldSchema(
            field["fieldName"],
            getattr(FieldType, field["fieldType"]),
            index=field.get("index", True),
            store=field.get("store", True),
            is_array=field.get("isAnArray", False),
            enable_sort_and_agg=field.get("enableSortAndAgg", False),
        )
        for field in schema["fieldSchemas"]
    ]

    index_sort = None
    sorters = (schema.get("indexSort") or {}).get("sorters") or []
    if sorters:
        index_sort = Sort(
            sorters=[
                FieldSort(s["fieldSort"]["fieldName"], getattr(SortOrder, s["fieldSort"].get("order", "ASC")))
                for s in sorters
            ]
        )

    return SearchIndexMeta(fields, index_setting=None, index_sort=index_sort)


class TablestoreService:
    """Data-plane calls against one instance: tables and search indexes.

    Backed by the blocking ``tablestore`` SDK, run in a worker thread. Every method
    raises ``TablestoreServiceError`` on failure; callers decide whether a not-found
    code is expected. An unresolvable endpoint host raises ``TablestoreNetworkingError``.
    """

    def __init__(self, config: TablestoreConfig, *, client: Optional[OTSClient] = None) -> None:
        self._config = config
        self._client = client or OTSClient(
            config.endpoint,
            config.access_key_id,
            config.access_key_secret,
            config.instance_name,
            socket_timeout=config.timeout_seconds,
        )

    @property
    def config(self) -> TablestoreConfig:
        return self._config

    @property
    def endpoint(self) -> str:
        return self._config.endpoint

    async def _call(self, action: str, func: Callable[..., Any], *args: Any) -> Any:
        try:
            return await asyncio.to_thread(func, *args)
        except OTSServiceError as exc:
            status = exc.get_http_status()
            code = exc.get_error_code()
            raise TablestoreServiceError(
                f"Tablestore {action} failed: HTTP {status} {code} {exc.get_error_message()}".strip(),
                code=code or status,
                status=status,
            ) from exc
        except OTSClientError as exc:
            if _is_dns_failure(exc):
                raise TablestoreNetworkingError(
                    f"Unable to resolve Tablestore endpoint {self._config.endpoint}: {exc.get_error_message()}",
                ) from exc
            logger.exception("Tablestore %s request failed (endpoint=%s)", action, self._config.endpoint)
            raise TablestoreServiceError(
                f"Tablestore {action} request failed: {exc.get_error_message()}",
                status=exc.get_http_status(),
            ) from exc
        except Exception as exc:
            if _is_dns_failure(exc):
                raise TablestoreNetworkingError(
                    f"Unable to resolve Tablestore endpoint {self._config.endpoint}: {exc}",
                ) from exc
            logger.exception("Tablestore %s request failed (endpoint=%s)", action, self._config.endpoint)
            raise TablestoreServiceError(f"Tablestore {action} request failed: {exc}") from exc

    async def describe_table(self, *, table_name: str) -> Any:
        return await self._call("DescribeTable", self._client.describe_table, table_name)

    async def create_table(self, params: dict[str, Any]) -> Any:
        table_meta, table_options, reserved = table_request_from_params(params)
        return await self._call("CreateTable", self._client.create_table, table_meta, table_options, reserved)

    async def delete_table(self, *, table_name: str) -> Any:
        return await self._call("DeleteTable", self._client.delete_table, table_name)

    async def describe_search_index(self, *, table_name: str, index_name: str) -> Any:
        return await self._call("DescribeSearchIndex", self._client.describe_search_index, table_name, index_name)

    async def create_search_index(self, params: dict[str, Any]) -> Any:
        return await self._call(
            "CreateSearchIndex",
            self._client.create_search_index,
            params["tableName"],
            params["indexName"],
            index_meta_from_params(params),
        )

    async def delete_search_index(self, *, table_name: str, index_name: str) -> Any:
        return await self._call("DeleteSearchIndex", self._client.delete_search_index, table_name, index_name)
