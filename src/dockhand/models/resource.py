"""Desired-state resource models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field


class MountSpec(BaseModel):
    """Volume or bind mount for a container."""
    model_config = ConfigDict(extra="forbid")

    source: str = Field(..., description="Volume name or host path")
    target: str = Field(..., description="Path inside the container")
    read_only: bool = Field(default=False)

    def as_argument(self) -> str:
        """Render as a docker -v argument."""
        value = f"{self.source}:{self.target}"
        return f"{value}:ro" if self.read_only else value


class PortSpec(BaseModel):
    """Published port mapping."""
    model_config = ConfigDict(extra="forbid")

    host: int = Field(..., ge=1, le=65535)
    container: int = Field(..., ge=1, le=65535)

    def as_argument(self) -> str:
        """Render as a docker -p argument."""
        return f"{self.host}:{self.container}"


class NetworkSpec(BaseModel):
    """Container network specification."""
    model_config = ConfigDict(extra="ignore")

    kind: Literal["network"] = "network"
    name: str = Field(..., min_length=1, description="Network name")


class VolumeSpec(BaseModel):
    """Named volume specification."""
    model_config = ConfigDict(extra="ignore")

    kind: Literal["volume"] = "volume"
    name: str = Field(..., min_length=1, description="Volume name")


class ContainerSpec(BaseModel):
    """Container specification."""
    model_config = ConfigDict(extra="ignore")

    kind: Literal["container"] = "container"
    name: str = Field(..., min_length=1, description="Container name")
    image: str = Field(..., min_length=1, description="Image reference")
    mounts: List[MountSpec] = Field(default_factory=list)
    ports: List[PortSpec] = Field(default_factory=list)
    environment: Dict[str, str] = Field(default_factory=dict)
    restart: str = Field(default="unless-stopped")
    network: Optional[str] = Field(None, description="Network to attach to")
    labels: Dict[str, str] = Field(default_factory=dict)
    command: List[str] = Field(default_factory=list)


ResourceSpec = Union[NetworkSpec, VolumeSpec, ContainerSpec]


class Outcome(Enum):
    """Reconciliation outcome for one resource."""
    CREATED = "created"
    RECREATED = "recreated"
    UNCHANGED = "unchanged"
    FAILED = "failed"


@dataclass
class ResourceOutcome:
    """Result of reconciling one resource."""
    kind: str
    name: str
    outcome: Outcome
    reason: Optional[str] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def converged(self) -> bool:
        return self.outcome != Outcome.FAILED
