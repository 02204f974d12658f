"""Pydantic models and plain data types for dockhand."""

from dockhand.models.config import (
    DockhandConfig,
    LoggingConfig,
    DockerConfig,
    RuntimeConfig,
    ProxyConfig,
    DemoConfig,
    NicConfig,
)
from dockhand.models.resource import (
    ContainerSpec,
    MountSpec,
    NetworkSpec,
    Outcome,
    PortSpec,
    ResourceOutcome,
    ResourceSpec,
    VolumeSpec,
)
from dockhand.models.parameter import (
    DerivedSource,
    EnvSource,
    FlagSource,
    ParameterSpec,
    PromptSource,
    RecordedSource,
)

__all__ = [
    "DockhandConfig",
    "LoggingConfig",
    "DockerConfig",
    "RuntimeConfig",
    "ProxyConfig",
    "DemoConfig",
    "NicConfig",
    "ContainerSpec",
    "MountSpec",
    "NetworkSpec",
    "Outcome",
    "PortSpec",
    "ResourceOutcome",
    "ResourceSpec",
    "VolumeSpec",
    "DerivedSource",
    "EnvSource",
    "FlagSource",
    "ParameterSpec",
    "PromptSource",
    "RecordedSource",
]
