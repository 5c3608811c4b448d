"""Table and search-index definitions for the four serverless-cd entities.

Each entity has a pair of pure builders:
- ``<entity>(name, env_config)`` returns the CreateTable parameters.
- ``<entity>_index(name, index_name)`` returns the CreateSearchIndex parameters.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping, Optional

TableParamsBuilder = Callable[[str, Mapping[str, str]], dict[str, Any]]
IndexParamsBuilder = Callable[[str, str], dict[str, Any]]

# -1 keeps rows forever.
_NO_TTL = -1


def _table_params(
    name: str,
    *,
    defined_columns: list[tuple[str, str]],
    time_to_live: int = _NO_TTL,
) -> dict[str, Any]:
    return {
        "tableMeta": {
            "tableName": name,
            "primaryKey": [{"name": "id", "type": "STRING"}],
            "definedColumn": [{"name": column, "type": column_type} for column, column_type in defined_columns],
        },
        "reservedThroughput": {"capacityUnit": {"read": 0, "write": 0}},
        "tableOptions": {"timeToLive": time_to_live, "maxVersions": 1},
    }


def _index_params(name: str, index_name: str, *, fields: list[tuple[str, str]]) -> dict[str, Any]:
    return {
        "tableName": name,
        "indexName": index_name,
        "schema": {
            "fieldSchemas": [
                {
                    "fieldName": field,
                    "fieldType": field_type,
                    "index": True,
                    "enableSortAndAgg": field_type != "TEXT",
                    "store": True,
                    "isAnArray": False,
                }
                for field, field_type in fields
            ],
            "indexSort": {"sorters": [{"fieldSort": {"fieldName": "created_time", "order": "DESC"}}]},
        },
    }


def user(name: str, env_config: Mapping[str, str]) -> dict[str, Any]:
    return _table_params(
        name,
        defined_columns=[
            ("username", "STRING"),
            ("email", "STRING"),
            ("password", "STRING"),
            ("secrets", "STRING"),
            ("third_part", "STRING"),
            ("created_time", "INTEGER"),
            ("updated_time", "INTEGER"),
        ],
    )


def user_index(name: str, index_name: str) -> dict[str, Any]:
    return _index_params(
        name,
        index_name,
        fields=[
            ("id", "KEYWORD"),
            ("username", "KEYWORD"),
            ("email", "KEYWORD"),
            ("created_time", "LONG"),
            ("updated_time", "LONG"),
        ],
    )


def application(name: str, env_config: Mapping[str, str]) -> dict[str, Any]:
    return _table_params(
        name,
        defined_columns=[
            ("owner_id", "STRING"),
            ("provider", "STRING"),
            ("provider_repo_id", "STRING"),
            ("repo_name", "STRING"),
            ("repo_url", "STRING"),
            ("environment", "STRING"),
            ("created_time", "INTEGER"),
            ("updated_time", "INTEGER"),
        ],
    )


def application_index(name: str, index_name: str) -> dict[str, Any]:
    return _index_params(
        name,
        index_name,
        fields=[
            ("id", "KEYWORD"),
            ("owner_id", "KEYWORD"),
            ("provider", "KEYWORD"),
            ("provider_repo_id", "KEYWORD"),
            ("repo_name", "KEYWORD"),
            ("created_time", "LONG"),
            ("updated_time", "LONG"),
        ],
    )


def task(name: str, env_config: Mapping[str, str]) -> dict[str, Any]:
    ttl_raw = (env_config.get("OTS_TASK_TTL_SECONDS") or "").strip()
    try:
        time_to_live = int(ttl_raw) if ttl_raw else _NO_TTL
    except ValueError as exc:
        raise ValueError("Invalid OTS_TASK_TTL_SECONDS; must be an integer") from exc

    return _table_params(
        name,
        defined_columns=[
            ("app_id", "STRING"),
            ("status", "STRING"),
            ("trigger_type", "STRING"),
            ("steps", "STRING"),
            ("dispatch_commit", "STRING"),
            ("created_time", "INTEGER"),
            ("updated_time", "INTEGER"),
        ],
        time_to_live=time_to_live,
    )


def task_index(name: str, index_name: str) -> dict[str, Any]:
    return _index_params(
        name,
        index_name,
        fields=[
            ("id", "KEYWORD"),
            ("app_id", "KEYWORD"),
            ("status", "KEYWORD"),
            ("trigger_type", "KEYWORD"),
            ("created_time", "LONG"),
            ("updated_time", "LONG"),
        ],
    )


def token(name: str, env_config: Mapping[str, str]) -> dict[str, Any]:
    return _table_params(
        name,
        defined_columns=[
            ("user_id", "STRING"),
            ("cd_token", "STRING"),
            ("description", "STRING"),
            ("expired_time", "INTEGER"),
            ("created_time", "INTEGER"),
            ("updated_time", "INTEGER"),
        ],
    )


def token_index(name: str, index_name: str) -> dict[str, Any]:
    return _index_params(
        name,
        index_name,
        fields=[
            ("id", "KEYWORD"),
            ("user_id", "KEYWORD"),
            ("cd_token", "KEYWORD"),
            ("description", "TEXT"),
            ("expired_time", "LONG"),
            ("created_time", "LONG"),
            ("updated_time", "LONG"),
        ],
    )


class DbEntity(str, Enum):
    USER = "user"
    APPLICATION = "application"
    TASK = "task"
    TOKEN = "token"


@dataclass(frozen=True)
class DbEntityDescriptor:
    entity: DbEntity
    name: str
    index_name: Optional[str]
    table_params: TableParamsBuilder
    index_params: IndexParamsBuilder


# Declaration order is the provisioning order.
_ENTITY_LAYOUT: tuple[tuple[DbEntity, str, str, TableParamsBuilder, IndexParamsBuilder], ...] = (
    (DbEntity.USER, "OTS_USER_TABLE_NAME", "OTS_USER_INDEX_NAME", user, user_index),
    (DbEntity.APPLICATION, "OTS_APP_TABLE_NAME", "OTS_APP_INDEX_NAME", application, application_index),
    (DbEntity.TASK, "OTS_TASK_TABLE_NAME", "OTS_TASK_INDEX_NAME", task, task_index),
    (DbEntity.TOKEN, "OTS_TOKEN_TABLE_NAME", "OTS_TOKEN_INDEX_NAME", token, token_index),
)


def build_db_entities(env_config: Mapping[str, str]) -> list[DbEntityDescriptor]:
    descriptors: list[DbEntityDescriptor] = []
    for entity, table_key, index_key, table_builder, index_builder in _ENTITY_LAYOUT:
        name = env_config.get(table_key)
        if not name:
            raise ValueError(f"Missing required config value: {table_key}")
        descriptors.append(
            DbEntityDescriptor(
                entity=entity,
                name=name,
                index_name=env_config.get(index_key) or None,
                table_params=table_builder,
                index_params=index_builder,
            )
        )

    names = [d.name for d in descriptors] + [d.index_name for d in descriptors if d.index_name]
    if len(names) != len(set(names)):
        raise ValueError(f"Table and index names must be unique, got {names}")

    return descriptors
