"""
Dockhand - idempotent container host provisioning.

Resolves operator input from flags, environment and prompts, converges
networks, volumes and containers, and merge-patches the Docker daemon
configuration without disturbing keys it does not own.
"""

__version__ = "1.0.0"

from dockhand.core.engine import Reconciler
from dockhand.core.merge import PatchOperation, merge_patch
from dockhand.models.config import DockhandConfig
from dockhand.models.parameter import ParameterSpec
from dockhand.models.resource import ContainerSpec, NetworkSpec, VolumeSpec
from dockhand.resolver import InputResolver

__all__ = [
    "ContainerSpec",
    "DockhandConfig",
    "InputResolver",
    "NetworkSpec",
    "ParameterSpec",
    "PatchOperation",
    "Reconciler",
    "VolumeSpec",
    "merge_patch",
]
