"""APT package installation."""

import logging
import subprocess
from typing import Iterable, List

from dockhand.errors import InstallError
from dockhand.utils.process import run_command


logger = logging.getLogger(__name__)

APT_FLAGS = ["-y", "-o", "Dpkg::Use-Pty=0", "-o", "Acquire::Retries=3"]


class AptInstaller:
    """Installs packages with apt-get, non-interactively."""

    def __init__(self, timeout: int = 1800):
        self.timeout = timeout
        self.env = {"DEBIAN_FRONTEND": "noninteractive"}

    async def _apt(self, args: List[str], action: str) -> None:
        cmd = ["apt-get", *args]
        try:
            await run_command(cmd, timeout=self.timeout, env=self.env)
        except subprocess.CalledProcessError as e:
            raise InstallError(f"Failed to {action}", stderr=e.stderr or "") from e
        except subprocess.TimeoutExpired as e:
            raise InstallError(f"Timed out trying to {action}") from e
        except FileNotFoundError as e:
            raise InstallError(f"Failed to {action}: apt-get not found") from e

    async def update(self) -> None:
        logger.info("Updating APT package lists")
        await self._apt(["update", "-o", "Acquire::Retries=3"], "update package lists")

    async def upgrade(self) -> None:
        logger.info("Upgrading base system")
        await self._apt(["upgrade", *APT_FLAGS], "upgrade packages")

    async def ensure_installed(self, names: Iterable[str]) -> None:
        """Install packages (names or local .deb paths); already-installed ones are no-ops."""
        names = list(names)
        if not names:
            return
        logger.info(f"Installing {', '.join(names)}")
        await self._apt(["install", *APT_FLAGS, *names], f"install {' '.join(names)}")

    async def architecture(self) -> str:
        try:
            result = await run_command(["dpkg", "--print-architecture"])
        except (subprocess.CalledProcessError, FileNotFoundError) as e:
            raise InstallError("Failed to determine package architecture") from e
        return result.stdout.strip()
