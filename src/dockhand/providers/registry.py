"""Provider registry keyed by resource kind."""

import logging
from typing import Dict, Optional, Type

from dockhand.providers.base import BaseProvider
from dockhand.providers.container import ContainerProvider
from dockhand.providers.network import NetworkProvider
from dockhand.providers.volume import VolumeProvider


logger = logging.getLogger(__name__)


class ProviderRegistry:
    """Registry for managing providers."""

    def __init__(self):
        """Initialize provider registry."""
        self._providers: Dict[str, BaseProvider] = {}
        self._provider_classes: Dict[str, Type[BaseProvider]] = {
            "network": NetworkProvider,
            "volume": VolumeProvider,
            "container": ContainerProvider,
        }

    async def initialize(self, engine):
        """Instantiate every provider and hand it the container engine."""
        for kind, provider_class in self._provider_classes.items():
            try:
                provider = provider_class()
                await provider.initialize(engine)
            except Exception as e:
                logger.error(f"Failed to initialize provider {kind}: {e}")
                raise
            self._providers[kind] = provider
            logger.debug(f"Initialized provider: {kind}")

    def get_provider(self, kind: str) -> Optional[BaseProvider]:
        """Get a provider by resource kind."""
        return self._providers.get(kind)

    def list_providers(self) -> list[str]:
        """List initialized provider kinds."""
        return list(self._providers.keys())
