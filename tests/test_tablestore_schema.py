"""Tests for the table/index schema builders."""

import pytest

from cdtool.services.tablestore_schema import DbEntity, build_db_entities, task


def test_entities_follow_declaration_order(env_config):
    entities = build_db_entities(env_config)

    assert [e.entity for e in entities] == [DbEntity.USER, DbEntity.APPLICATION, DbEntity.TASK, DbEntity.TOKEN]
    assert [e.name for e in entities] == ["cd_user", "cd_application", "cd_task", "cd_token"]


def test_builders_use_given_names(env_config):
    for entity in build_db_entities(env_config):
        table = entity.table_params(entity.name, env_config)
        index = entity.index_params(entity.name, entity.index_name)

        assert table["tableMeta"]["tableName"] == entity.name
        assert table["tableMeta"]["primaryKey"] == [{"name": "id", "type": "STRING"}]
        assert index["tableName"] == entity.name
        assert index["indexName"] == entity.index_name
        assert {"fieldName": "id"}.items() <= index["schema"]["fieldSchemas"][0].items()


def test_task_ttl_from_config():
    assert task("t", {})["tableOptions"]["timeToLive"] == -1
    assert task("t", {"OTS_TASK_TTL_SECONDS": "86400"})["tableOptions"]["timeToLive"] == 86400
    with pytest.raises(ValueError):
        task("t", {"OTS_TASK_TTL_SECONDS": "soon"})


def test_missing_index_name_means_no_index(env_config):
    env_config["OTS_TOKEN_INDEX_NAME"] = ""

    assert build_db_entities(env_config)[-1].index_name is None


def test_duplicate_names_rejected(env_config):
    env_config["OTS_TASK_TABLE_NAME"] = env_config["OTS_USER_TABLE_NAME"]

    with pytest.raises(ValueError, match="unique"):
        build_db_entities(env_config)


def test_missing_table_name_rejected(env_config):
    del env_config["OTS_APP_TABLE_NAME"]

    with pytest.raises(ValueError, match="OTS_APP_TABLE_NAME"):
        build_db_entities(env_config)
