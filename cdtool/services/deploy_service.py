from __future__ import annotations

import asyncio
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class DeployToolError(RuntimeError):
    pass


class DeployToolService:
    """Runs the Serverless Devs ``s`` CLI to remove the deployed function resources."""

    def __init__(self, *, executable: str = "s") -> None:
        self._executable = executable

    async def remove(self, *, manifest: Path) -> None:
        args = [self._executable, "-t", str(manifest), "remove", "-y"]
        logger.debug("Running %s", " ".join(args))

        try:
            proc = await asyncio.create_subprocess_exec(
                *args,
                cwd=str(manifest.parent),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except OSError as exc:
            raise DeployToolError(f"Unable to run {self._executable!r}") from exc

        output, _ = await proc.communicate()
        for line in (output or b"").decode("utf-8", errors="replace").splitlines():
            logger.debug("[%s] %s", self._executable, line)

        if proc.returncode != 0:
            raise DeployToolError(f"{self._executable} remove failed with return code {proc.returncode}")
