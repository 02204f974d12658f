"""Helpers shared by the workflows."""

import logging
import shutil
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from dockhand.core.engine import all_converged
from dockhand.errors import PreconditionError
from dockhand.models.resource import ResourceOutcome
from dockhand.utils.docker import DockerEngine


logger = logging.getLogger(__name__)


@dataclass
class StackResult:
    """Resolved parameters and per-resource outcomes of a stack deployment."""
    parameters: Dict[str, Optional[str]]
    outcomes: List[ResourceOutcome] = field(default_factory=list)
    table: str = ""

    @property
    def converged(self) -> bool:
        return all_converged(self.outcomes)


async def require_docker(engine: DockerEngine) -> None:
    """Fail unless the docker CLI is installed and the daemon answers."""
    if shutil.which(engine.binary) is None:
        raise PreconditionError("Docker is required but not found.")
    if not await engine.ping():
        raise PreconditionError("Docker daemon not responding.")


async def stack_table(engine: DockerEngine) -> str:
    """Container table for the summary; empty if docker cannot list."""
    try:
        return await engine.stack_table()
    except Exception as e:
        logger.warning(f"Could not list containers: {e}")
        return ""
