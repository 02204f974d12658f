"""Docker CLI wrapper used by providers and workflows."""

import logging
import subprocess
from typing import Dict, List

from dockhand.errors import RunError
from dockhand.models.resource import ContainerSpec
from dockhand.utils.process import CommandResult, run_command


logger = logging.getLogger(__name__)


class DockerEngine:
    """Narrow interface to the container engine.

    Query methods report absence as False rather than raising; mutating
    methods raise RunError with the engine's stderr.
    """

    def __init__(self, binary: str = "docker", timeout: int = 600):
        self.binary = binary
        self.timeout = timeout

    async def _run(self, args: List[str], action: str, check: bool = True) -> CommandResult:
        cmd = [self.binary, *args]
        try:
            return await run_command(cmd, check=check, timeout=self.timeout)
        except subprocess.CalledProcessError as e:
            raise RunError(f"Failed to {action}", stderr=e.stderr or "") from e
        except subprocess.TimeoutExpired as e:
            raise RunError(f"Timed out trying to {action}") from e
        except FileNotFoundError as e:
            raise RunError(f"Failed to {action}: {self.binary} not found") from e

    async def _succeeds(self, args: List[str], action: str) -> bool:
        result = await self._run(args, action, check=False)
        return result.returncode == 0

    async def ping(self) -> bool:
        """Check that the daemon responds."""
        try:
            return await self._succeeds(["info", "--format", "{{.ServerVersion}}"], "query docker daemon")
        except RunError as e:
            logger.debug(f"Docker not reachable: {e}")
            return False

    async def network_exists(self, name: str) -> bool:
        return await self._succeeds(["network", "inspect", name], f"inspect network {name}")

    async def create_network(self, name: str) -> None:
        await self._run(["network", "create", name], f"create network {name}")

    async def volume_exists(self, name: str) -> bool:
        return await self._succeeds(["volume", "inspect", name], f"inspect volume {name}")

    async def create_volume(self, name: str) -> None:
        await self._run(["volume", "create", name], f"create volume {name}")

    async def list_containers(self, all_states: bool = True) -> List[str]:
        """Names of containers, including stopped ones unless all_states is False."""
        args = ["ps", "--format", "{{.Names}}"]
        if all_states:
            args.insert(1, "-a")
        result = await self._run(args, "list containers")
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    async def container_exists(self, name: str) -> bool:
        """Whether a container with this exact name exists in any state."""
        return name in await self.list_containers(all_states=True)

    async def container_running(self, name: str) -> bool:
        return name in await self.list_containers(all_states=False)

    async def remove_container(self, name: str, force: bool = True) -> None:
        args = ["rm", name]
        if force:
            args.insert(1, "-f")
        await self._run(args, f"remove container {name}")

    async def pull_image(self, ref: str) -> None:
        await self._run(["pull", ref], f"pull image {ref}")

    async def run_container(self, spec: ContainerSpec) -> str:
        """Start a detached container; returns the container id."""
        result = await self._run(self.run_arguments(spec), f"run container {spec.name}")
        return result.stdout.strip()

    async def inspect_env(self, name: str) -> Dict[str, str]:
        """Environment recorded on a container; empty if it does not exist."""
        result = await self._run(
            ["inspect", "--type", "container", "--format", "{{range .Config.Env}}{{println .}}{{end}}", name],
            f"inspect container {name}",
            check=False,
        )
        if result.returncode != 0:
            return {}
        env = {}
        for line in result.stdout.splitlines():
            key, sep, value = line.partition("=")
            if sep and key:
                env[key] = value
        return env

    async def info_summary(self) -> str:
        result = await self._run(
            [
                "info",
                "--format",
                "Default runtime: {{.DefaultRuntime}}\n"
                "Runtimes: {{range $k, $v := .Runtimes}}{{printf \"%s \" $k}}{{end}}\n"
                "Init Binary: {{.InitBinary}}\n"
                "containerd version: {{.ContainerdVersion}}",
            ],
            "query docker info",
        )
        return result.stdout.strip()

    async def stack_table(self) -> str:
        result = await self._run(
            ["ps", "--format", "table {{.Names}}\t{{.Image}}\t{{.Status}}\t{{.Ports}}"],
            "list containers",
        )
        return result.stdout.rstrip()

    @staticmethod
    def run_arguments(spec: ContainerSpec) -> List[str]:
        """Build `docker run` arguments for a container spec."""
        args = ["run", "-d", "--name", spec.name, "--restart", spec.restart]
        for port in spec.ports:
            args.extend(["-p", port.as_argument()])
        for key, value in spec.environment.items():
            args.extend(["-e", f"{key}={value}"])
        for mount in spec.mounts:
            args.extend(["-v", mount.as_argument()])
        if spec.network:
            args.extend(["--network", spec.network])
        for key, value in spec.labels.items():
            args.extend(["--label", f"{key}={value}"])
        args.append(spec.image)
        args.extend(spec.command)
        return args
