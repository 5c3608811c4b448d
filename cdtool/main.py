from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, List, Optional

import aiohttp
import typer

from cdtool.models.remove import RemoveOptions
from cdtool.services.config import Credentials, service_name_from_props, synthesize_env_config
from cdtool.services.dependencies import get_generate_service, get_remove_service
from cdtool.services.domain_service import DomainServiceError
from cdtool.services.env_file_service import (
    ProjectRootNotFoundError,
    env_file_path,
    find_src_path,
    read_env_file,
    write_env_file,
)
from cdtool.services.oss_service import OssServiceError
from cdtool.services.remove_service import RemoveError
from cdtool.services.tablestore_service import TablestoreServiceError

logger = logging.getLogger(__name__)

app = typer.Typer(help="Provision and remove the cloud resources of a serverless-cd deployment")

_HANDLED_ERRORS = (
    ProjectRootNotFoundError,
    FileNotFoundError,
    ValueError,
    TablestoreServiceError,
    OssServiceError,
    DomainServiceError,
    RemoveError,
)


def _ensure_logging(debug: bool = False) -> None:
    level = logging.DEBUG if debug else logging.INFO
    formatter = logging.Formatter("%(levelname)s: %(message)s")
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format="%(levelname)s: %(message)s")
    else:
        root.setLevel(level)
        for handler in root.handlers:
            handler.setFormatter(formatter)


def parse_props(raw: Optional[List[str]]) -> dict[str, Any]:
    props: dict[str, Any] = {}
    for item in raw or []:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise typer.BadParameter(f"Expected KEY=VALUE, got {item!r}", param_hint="--prop")
        props[key.strip()] = value.strip()
    return props


def default_env_config(props: dict[str, Any]) -> dict[str, str]:
    return synthesize_env_config(props, Credentials.resolve(props))


async def _generate(props: dict[str, Any], env_path: Path) -> None:
    env_config = default_env_config(props)
    async with aiohttp.ClientSession() as session:
        result = await get_generate_service(session).generate(
            env_config,
            service_name=service_name_from_props(props),
        )
    write_env_file(env_path, result.env_config)


async def _remove(props: dict[str, Any], src_path: Path, options: RemoveOptions) -> None:
    env_file = read_env_file(env_file_path(src_path))
    credentials = Credentials.from_props(props) or Credentials.from_props(env_file) or Credentials.from_env()
    env_config = synthesize_env_config(props, credentials)
    env_config.update(env_file)
    manifest = src_path / options.yaml
    await get_remove_service().remove(env_config, options, manifest=manifest)


@app.command()
def generate(
    path: Optional[Path] = typer.Option(None, help="Project config path (file or directory)"),
    prop: Optional[List[str]] = typer.Option(None, "--prop", help="Property as KEY=VALUE; repeatable"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Overwrite an existing .env without asking"),
    debug: bool = typer.Option(False, help="Verbose logging"),
):
    """Generate cloud resources for serverless-cd and write them to src/.env."""
    _ensure_logging(debug)
    props = parse_props(prop)
    try:
        src_path = find_src_path(path)
        env_path = env_file_path(src_path)
        if env_path.exists() and not yes:
            if not typer.confirm(f"{env_path} exists, overwrite it? Exit if not overwritten"):
                return
        asyncio.run(_generate(props, env_path))
    except _HANDLED_ERRORS as exc:
        logger.error("%s", exc)
        raise typer.Exit(code=1) from exc


@app.command()
def remove(
    path: Optional[Path] = typer.Option(None, help="Project config path (file or directory)"),
    prop: Optional[List[str]] = typer.Option(None, "--prop", help="Property as KEY=VALUE; repeatable"),
    type_filter: Optional[str] = typer.Option(None, "--type", help="Resource types to remove, e.g. 'oss,ots' (fc, ots, oss)"),
    remove_all: bool = typer.Option(False, "--all", help="Remove every resource type"),
    deep: bool = typer.Option(False, "--deep", help="Also remove the database instance and the auto-created bucket"),
    yaml: str = typer.Option("s.yaml", "--yaml", help="Target manifest used to remove the function"),
    debug: bool = typer.Option(False, help="Verbose logging"),
):
    """Remove serverless-cd cloud resources."""
    _ensure_logging(debug)
    props = parse_props(prop)
    options = RemoveOptions.parse(type_filter=type_filter, remove_all=remove_all, deep=deep, yaml=yaml)
    try:
        src_path = find_src_path(path)
        asyncio.run(_remove(props, src_path, options))
    except _HANDLED_ERRORS as exc:
        logger.error("%s", exc)
        raise typer.Exit(code=1) from exc


if __name__ == "__main__":
    app()
