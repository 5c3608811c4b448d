"""Tests for project-root detection and the .env file."""

import pytest

from cdtool.services.env_file_service import (
    ProjectRootNotFoundError,
    find_src_path,
    read_env_file,
    write_env_file,
)


def test_publish_yaml_marks_project_root(tmp_path):
    (tmp_path / "publish.yaml").write_text("")

    assert find_src_path(tmp_path) == tmp_path / "src"


def test_generate_yaml_marks_src_dir(tmp_path):
    (tmp_path / "generate.yaml").write_text("")

    assert find_src_path(tmp_path) == tmp_path
    assert find_src_path(tmp_path / "generate.yaml") == tmp_path


def test_missing_markers(tmp_path):
    with pytest.raises(ProjectRootNotFoundError):
        find_src_path(tmp_path)


def test_env_file_is_key_value_lines(tmp_path):
    path = tmp_path / "src" / ".env"

    write_env_file(path, {"REGION": "cn-hangzhou", "DOMAIN": "example.com", "EMPTY": None})

    assert path.read_text() == "REGION=cn-hangzhou\nDOMAIN=example.com\nEMPTY=\n"
    assert read_env_file(path) == {"REGION": "cn-hangzhou", "DOMAIN": "example.com", "EMPTY": ""}


def test_missing_env_file_reads_empty(tmp_path):
    assert read_env_file(tmp_path / ".env") == {}
