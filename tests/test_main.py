"""Tests for the command line entry point."""

import pytest
import typer
from typer.testing import CliRunner

from cdtool.main import app, parse_props

runner = CliRunner()


def test_parse_props():
    assert parse_props(["dbPrefix=x", " REGION = cn-beijing "]) == {"dbPrefix": "x", "REGION": "cn-beijing"}
    assert parse_props(None) == {}
    with pytest.raises(typer.BadParameter):
        parse_props(["no-equals"])


def test_generate_outside_project_fails(tmp_path):
    result = runner.invoke(app, ["generate", "--path", str(tmp_path), "--yes"])

    assert result.exit_code == 1


def test_generate_declined_overwrite_does_nothing(tmp_path, monkeypatch):
    (tmp_path / "generate.yaml").write_text("")
    (tmp_path / ".env").write_text("REGION=cn-hangzhou\n")

    def fail(*args, **kwargs):
        raise AssertionError("should not provision")

    monkeypatch.setattr("cdtool.main.asyncio.run", fail)

    result = runner.invoke(app, ["generate", "--path", str(tmp_path)], input="n\n")

    assert result.exit_code == 0
    assert (tmp_path / ".env").read_text() == "REGION=cn-hangzhou\n"
