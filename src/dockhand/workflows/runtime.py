"""Sandboxed runtime installation and registration with the Docker daemon."""

import asyncio
import logging
import os
import platform
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from dockhand.core.merge import MergeResult, merge_patch, runtime_operations, write_atomic
from dockhand.errors import InstallError, PreconditionError
from dockhand.models.config import DockerConfig, DockhandConfig, RuntimeConfig
from dockhand.utils.apt import AptInstaller
from dockhand.utils.docker import DockerEngine
from dockhand.utils.download import download_file
from dockhand.utils.systemd import SystemdDBus
from dockhand.utils.templates import DOCKER_OVERRIDE_TEMPLATE, DOCKER_SOURCES_TEMPLATE, render_template


logger = logging.getLogger(__name__)

SUPPORTED_FAMILIES = ("debian", "ubuntu")
SUPPORTED_ARCH = "amd64"


@dataclass
class RuntimeRegistration:
    """What registering the runtime changed."""
    merge: Optional[MergeResult] = None
    override_path: Optional[Path] = None
    restarted: bool = False
    error: Optional[str] = None
    info: str = ""


def override_path(docker: DockerConfig) -> Path:
    return Path(docker.system_dir) / f"{docker.unit}.d" / "override.conf"


def render_override(docker: DockerConfig) -> str:
    """ExecStart override that drops any packaged --default-runtime flag."""
    socket = Path(docker.containerd_socket)
    return render_template(
        DOCKER_OVERRIDE_TEMPLATE,
        dockerd=docker.dockerd,
        daemon_config=docker.daemon_config,
        containerd_socket=docker.containerd_socket if socket.is_socket() else None,
    )


def write_override(docker: DockerConfig) -> Path:
    path = override_path(docker)
    path.parent.mkdir(mode=0o755, parents=True, exist_ok=True)
    write_atomic(path, render_override(docker))
    logger.info(f"Wrote systemd override {path}")
    return path


async def register_runtime(
    docker: DockerConfig,
    runtime: RuntimeConfig,
    systemd: SystemdDBus,
    set_default: Optional[bool] = None,
    override: Optional[bool] = None,
) -> RuntimeRegistration:
    """Register the runtime in daemon.json, optionally override the unit, restart Docker.

    The daemon config is the authoritative place for the default runtime;
    the unit override only removes a packaged flag that would shadow it.
    Failures are reported on the result instead of raised so a re-run can
    finish the job.
    """
    set_default = runtime.set_default if set_default is None else set_default
    override = runtime.write_override if override is None else override
    registration = RuntimeRegistration()

    logger.info(f"Registering '{runtime.name}' in {docker.daemon_config}")
    operations = runtime_operations(runtime.name, runtime.path, set_default)
    try:
        registration.merge = await asyncio.to_thread(merge_patch, docker.daemon_config, operations)
    except Exception as e:
        registration.error = f"Could not update {docker.daemon_config}: {e}"
        logger.error(registration.error)
        return registration

    if override:
        try:
            registration.override_path = await asyncio.to_thread(write_override, docker)
        except OSError as e:
            registration.error = f"Could not write systemd override: {e}"
            logger.error(registration.error)
            return registration

    try:
        await systemd.reload_daemon()
        await systemd.restart_unit(docker.unit)
        registration.restarted = True
    except Exception as e:
        registration.error = f"Could not restart {docker.unit}, restart it manually: {e}"
        logger.error(registration.error)

    return registration


def read_os_release() -> Dict[str, str]:
    try:
        return platform.freedesktop_os_release()
    except OSError as e:
        raise PreconditionError("/etc/os-release not found; unsupported system.") from e


def check_os_family(release: Dict[str, str]) -> None:
    families = f"{release.get('ID_LIKE', '')} {release.get('ID', '')}".lower().split()
    if not any(family in SUPPORTED_FAMILIES for family in families):
        detected = release.get("PRETTY_NAME", "unknown")
        raise PreconditionError(f"Debian/Ubuntu-family system required. Detected: {detected}")


def require_root() -> None:
    if os.geteuid() != 0:
        raise PreconditionError("This command must be run as root.")


async def install_docker_repository(docker: DockerConfig, arch: str, release: Dict[str, str]) -> None:
    """Add Docker's signing key and APT source."""
    codename = release.get("VERSION_CODENAME", "")
    if not codename:
        raise PreconditionError("Could not determine distro codename.")

    keyring = Path(docker.keyring_path)
    await asyncio.to_thread(lambda: keyring.parent.mkdir(mode=0o755, parents=True, exist_ok=True))
    await download_file(docker.apt_key_url, keyring)
    await asyncio.to_thread(os.chmod, keyring, 0o644)

    content = render_template(
        DOCKER_SOURCES_TEMPLATE,
        arch=arch,
        keyring=docker.keyring_path,
        repository=docker.apt_repository,
        codename=codename,
    )
    await asyncio.to_thread(write_atomic, Path(docker.sources_list), content)
    logger.info(f"Configured Docker APT repository for {codename}")


async def install_runtime(
    config: DockhandConfig,
    installer: AptInstaller,
    systemd: SystemdDBus,
    engine: DockerEngine,
    set_default: Optional[bool] = None,
    override: Optional[bool] = None,
) -> RuntimeRegistration:
    """Install Sysbox and Docker CE, then register Sysbox with the daemon."""
    require_root()
    release = read_os_release()
    check_os_family(release)

    arch = await installer.architecture()
    if arch != SUPPORTED_ARCH:
        raise PreconditionError(f"Sysbox package is {SUPPORTED_ARCH}; detected architecture: {arch}")

    await installer.update()
    await installer.upgrade()
    await installer.ensure_installed(config.runtime.prerequisites)

    url = config.runtime.resolved_package_url
    with tempfile.TemporaryDirectory(prefix="dockhand-") as work_dir:
        package = Path(work_dir) / url.rsplit("/", 1)[-1]
        try:
            digest = await download_file(url, package)
        except Exception as e:
            raise InstallError(f"Failed to download {url}: {e}") from e
        logger.info(f"SHA256 of {package.name}: {digest}")
        await installer.ensure_installed([str(package)])

    try:
        await install_docker_repository(config.docker, arch, release)
    except PreconditionError:
        raise
    except Exception as e:
        raise InstallError(f"Failed to configure Docker repository: {e}") from e

    await installer.update()
    await installer.ensure_installed(config.docker.packages)

    registration = await register_runtime(config.docker, config.runtime, systemd, set_default, override)
    try:
        registration.info = await engine.info_summary()
    except Exception as e:
        logger.warning(f"Could not query docker info: {e}")
    return registration
