"""Subprocess helpers."""

import asyncio
import logging
import os
import shlex
import subprocess
from dataclasses import dataclass
from typing import List, Mapping, Optional


logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Exit status and decoded output of a finished command."""
    returncode: int
    stdout: str = ""
    stderr: str = ""


def _decode(data: Optional[bytes]) -> str:
    return data.decode(errors="replace") if data else ""


async def run_command(
    cmd: List[str],
    check: bool = True,
    timeout: Optional[float] = None,
    env: Optional[Mapping[str, str]] = None,
) -> CommandResult:
    """Run cmd without a shell and capture its output.

    stdin is always /dev/null: the terminal belongs to the input resolver,
    so a child process must never block on it. env is layered over the
    current environment. Raises CalledProcessError when check is set and
    the command fails, TimeoutExpired after killing it on timeout.
    """
    logger.debug(f"Running: {shlex.join(cmd)}")

    process = await asyncio.create_subprocess_exec(
        *cmd,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        env={**os.environ, **env} if env else None,
    )

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        raise subprocess.TimeoutExpired(cmd, timeout)

    result = CommandResult(process.returncode, _decode(stdout), _decode(stderr))
    if result.returncode != 0:
        logger.debug(f"{cmd[0]} exited {result.returncode}: {result.stderr.strip()}")
        if check:
            raise subprocess.CalledProcessError(
                result.returncode, cmd, output=result.stdout, stderr=result.stderr
            )
    return result
