from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping, Optional

from dotenv import dotenv_values

logger = logging.getLogger(__name__)

ENV_FILE_NAME = ".env"
ROOT_MARKER = "publish.yaml"
SRC_MARKER = "generate.yaml"


class ProjectRootNotFoundError(ValueError):
    pass


def current_path(config_path: Optional[Path] = None) -> Path:
    if config_path is None:
        return Path.cwd()
    if config_path.is_dir():
        return config_path
    if config_path.exists():
        return config_path.parent
    return Path.cwd()


def find_src_path(config_path: Optional[Path] = None) -> Path:
    """Locate the project's source directory from a marker file.

    ``publish.yaml`` marks the project root (sources live in ``src/``);
    ``generate.yaml`` marks the source directory itself.
    """

    path = current_path(config_path)
    if (path / ROOT_MARKER).exists():
        return path / "src"
    if (path / SRC_MARKER).exists():
        return path
    raise ProjectRootNotFoundError(
        f"Run this command from the root of a serverless-cd project (no {ROOT_MARKER} or {SRC_MARKER} in {path})"
    )


def env_file_path(src_path: Path) -> Path:
    return src_path / ENV_FILE_NAME


def read_env_file(path: Path) -> dict[str, str]:
    if not path.exists():
        logger.debug("Env file %s not found", path)
        return {}
    return {key: value or "" for key, value in dotenv_values(path).items()}


def write_env_file(path: Path, env_config: Mapping[str, Optional[str]]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    content = "".join(f"{key}={value or ''}\n" for key, value in env_config.items())
    path.write_text(content, encoding="utf-8")
    logger.info("Wrote %d value(s) to %s", len(env_config), path)
