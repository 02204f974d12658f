"""Container provider."""

import logging
from typing import List, Optional

from dockhand.errors import RunError
from dockhand.models.resource import ContainerSpec, Outcome
from dockhand.providers.base import BaseProvider, ProviderStatus
from dockhand.utils.docker import DockerEngine


logger = logging.getLogger(__name__)


class ContainerProvider(BaseProvider):
    """Full-replace reconciliation of containers.

    The observed container is never inspected or patched: if one with the
    same name exists in any state it is force-removed and the desired spec
    is run in its place.
    """

    def __init__(self):
        self.engine: Optional[DockerEngine] = None
        self.warnings: List[str] = []

    async def initialize(self, engine: DockerEngine):
        self.engine = engine

    async def status(self, spec: ContainerSpec) -> ProviderStatus:
        try:
            if await self.engine.container_exists(spec.name):
                return ProviderStatus.PRESENT
            return ProviderStatus.ABSENT
        except RunError as e:
            logger.error(f"Error checking container {spec.name}: {e}")
            return ProviderStatus.ERROR

    async def present(self, spec: ContainerSpec) -> Outcome:
        self.warnings = []
        await self._pull(spec.image)

        current_status = await self.status(spec)
        if current_status == ProviderStatus.ERROR:
            raise RunError(f"Could not determine whether container {spec.name} exists")

        existed = current_status == ProviderStatus.PRESENT
        if existed:
            logger.info(f"Recreating container '{spec.name}'")
            await self._remove(spec.name)
        else:
            logger.info(f"Creating container '{spec.name}'")

        container_id = await self.engine.run_container(spec)
        logger.debug(f"Container {spec.name} started as {container_id[:12]}")
        return Outcome.RECREATED if existed else Outcome.CREATED

    async def validate_spec(self, spec: ContainerSpec) -> bool:
        if not spec.image:
            logger.error(f"Container {spec.name} has no image")
            return False
        targets = [mount.target for mount in spec.mounts]
        if len(targets) != len(set(targets)):
            logger.error(f"Container {spec.name} mounts the same target twice")
            return False
        return True

    async def _pull(self, image: str) -> None:
        """Pull the image; failure is recorded and the cached image is used."""
        try:
            await self.engine.pull_image(image)
        except RunError as e:
            message = f"Pull of {image} failed, using cached image: {e}"
            logger.warning(message)
            self.warnings.append(message)

    async def _remove(self, name: str) -> None:
        """Force-remove; the run that follows reports any real conflict."""
        try:
            await self.engine.remove_container(name, force=True)
        except RunError as e:
            message = f"Removal of {name} reported an error: {e}"
            logger.warning(message)
            self.warnings.append(message)
