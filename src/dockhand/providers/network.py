"""Network provider."""

import logging
from typing import Optional

from dockhand.models.resource import NetworkSpec, Outcome
from dockhand.providers.base import BaseProvider, ProviderStatus
from dockhand.utils.docker import DockerEngine


logger = logging.getLogger(__name__)


class NetworkProvider(BaseProvider):
    """Existence-only reconciliation of container networks.

    An existing network is never compared against the spec or modified.
    """

    def __init__(self):
        self.engine: Optional[DockerEngine] = None

    async def initialize(self, engine: DockerEngine):
        self.engine = engine

    async def status(self, spec: NetworkSpec) -> ProviderStatus:
        if await self.engine.network_exists(spec.name):
            return ProviderStatus.PRESENT
        return ProviderStatus.ABSENT

    async def present(self, spec: NetworkSpec) -> Outcome:
        if await self.status(spec) == ProviderStatus.PRESENT:
            logger.info(f"Network '{spec.name}' exists")
            return Outcome.UNCHANGED

        logger.info(f"Creating network '{spec.name}'")
        await self.engine.create_network(spec.name)
        return Outcome.CREATED

    async def validate_spec(self, spec: NetworkSpec) -> bool:
        return bool(spec.name)
