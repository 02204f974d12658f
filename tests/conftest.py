"""Shared test fixtures."""

from typing import Dict, List, Set

import pytest

from dockhand.errors import RunError
from dockhand.models.resource import ContainerSpec


class FakeDockerEngine:
    """In-memory stand-in for the docker CLI wrapper."""

    binary = "docker"

    def __init__(self):
        self.networks: Set[str] = set()
        self.volumes: Set[str] = set()
        self.containers: Dict[str, ContainerSpec] = {}
        self.running: Set[str] = set()
        self.calls: List[tuple] = []
        self.fail_run: Set[str] = set()
        self.fail_pull: Set[str] = set()
        self.fail_network_create: Set[str] = set()

    async def ping(self):
        return True

    async def network_exists(self, name):
        return name in self.networks

    async def create_network(self, name):
        self.calls.append(("create_network", name))
        if name in self.fail_network_create:
            raise RunError(f"Failed to create network {name}", stderr="network error")
        self.networks.add(name)

    async def volume_exists(self, name):
        return name in self.volumes

    async def create_volume(self, name):
        self.calls.append(("create_volume", name))
        self.volumes.add(name)

    async def list_containers(self, all_states=True):
        if all_states:
            return list(self.containers)
        return [name for name in self.containers if name in self.running]

    async def container_exists(self, name):
        return name in self.containers

    async def remove_container(self, name, force=True):
        self.calls.append(("remove_container", name))
        self.containers.pop(name, None)
        self.running.discard(name)

    async def pull_image(self, ref):
        self.calls.append(("pull_image", ref))
        if ref in self.fail_pull:
            raise RunError(f"Failed to pull image {ref}", stderr="no network")

    async def run_container(self, spec):
        self.calls.append(("run_container", spec.name))
        if spec.name in self.fail_run:
            raise RunError(f"Failed to run container {spec.name}", stderr="port is already allocated")
        if spec.network and spec.network not in self.networks:
            raise RunError(f"Failed to run container {spec.name}", stderr="network not found")
        self.containers[spec.name] = spec.model_copy(deep=True)
        self.running.add(spec.name)
        return "0123456789abcdef"

    async def inspect_env(self, name):
        spec = self.containers.get(name)
        return dict(spec.environment) if spec else {}

    async def stack_table(self):
        return "NAMES\n" + "\n".join(sorted(self.running))


@pytest.fixture
def fake_engine():
    """Fresh in-memory docker engine."""
    return FakeDockerEngine()
