"""Volume provider."""

import logging
from typing import Optional

from dockhand.models.resource import Outcome, VolumeSpec
from dockhand.providers.base import BaseProvider, ProviderStatus
from dockhand.utils.docker import DockerEngine


logger = logging.getLogger(__name__)


class VolumeProvider(BaseProvider):
    """Existence-only reconciliation of named volumes."""

    def __init__(self):
        self.engine: Optional[DockerEngine] = None

    async def initialize(self, engine: DockerEngine):
        self.engine = engine

    async def status(self, spec: VolumeSpec) -> ProviderStatus:
        if await self.engine.volume_exists(spec.name):
            return ProviderStatus.PRESENT
        return ProviderStatus.ABSENT

    async def present(self, spec: VolumeSpec) -> Outcome:
        if await self.status(spec) == ProviderStatus.PRESENT:
            logger.info(f"Volume '{spec.name}' exists")
            return Outcome.UNCHANGED

        logger.info(f"Creating volume '{spec.name}'")
        await self.engine.create_volume(spec.name)
        return Outcome.CREATED

    async def validate_spec(self, spec: VolumeSpec) -> bool:
        return bool(spec.name)
