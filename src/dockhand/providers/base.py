"""Provider interface for reconcilable resource kinds."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any

from pydantic import BaseModel

from dockhand.models.resource import Outcome


class ProviderStatus(Enum):
    """Observed state of a resource in the container engine."""
    PRESENT = "present"
    ABSENT = "absent"
    UNKNOWN = "unknown"
    ERROR = "error"


class BaseProvider(ABC):
    """One provider per resource kind; the reconciler calls present() once per resource."""

    @abstractmethod
    async def initialize(self, engine: Any):
        """Bind the container engine the provider will act on."""

    @abstractmethod
    async def status(self, spec: BaseModel) -> ProviderStatus:
        """Whether a resource with this identity exists."""

    @abstractmethod
    async def present(self, spec: BaseModel) -> Outcome:
        """Converge the resource to its spec and report what happened.

        Raises on failure; the reconciler records the error against the
        resource and moves on.
        """

    @abstractmethod
    async def validate_spec(self, spec: BaseModel) -> bool:
        """Reject specs the engine could not act on."""
