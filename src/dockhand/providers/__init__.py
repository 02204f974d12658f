"""Resource providers for dockhand."""

from dockhand.providers.base import BaseProvider, ProviderStatus
from dockhand.providers.registry import ProviderRegistry

__all__ = [
    "BaseProvider",
    "ProviderStatus",
    "ProviderRegistry",
]
