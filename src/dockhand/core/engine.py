"""Resource reconciliation engine."""

import logging
from collections import Counter
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Set

from dockhand.errors import ResourceReconcileError
from dockhand.models.resource import Outcome, ResourceOutcome, ResourceSpec
from dockhand.providers import ProviderRegistry


logger = logging.getLogger(__name__)


class Reconciler:
    """Converges a declared inventory of networks, volumes and containers.

    Resources are processed strictly one after another. A failure is
    recorded against its resource and the remaining ones are still tried.
    """

    def __init__(self, provider_registry: ProviderRegistry):
        self.provider_registry = provider_registry
        self.last_reconciliation: Optional[datetime] = None

    async def reconcile(self, specs: Sequence[ResourceSpec]) -> List[ResourceOutcome]:
        """Reconcile specs and return one outcome per resource."""
        check_identities(specs)

        start_time = datetime.now()
        logger.info(f"Reconciling {len(specs)} resource(s)")

        outcomes: List[ResourceOutcome] = []
        failed_networks: Set[str] = set()
        for spec in processing_order(specs):
            outcome = await self._reconcile_one(spec, failed_networks)
            if spec.kind == "network" and not outcome.converged:
                failed_networks.add(spec.name)
            outcomes.append(outcome)

        self.last_reconciliation = datetime.now()
        duration = (self.last_reconciliation - start_time).total_seconds()
        logger.info(f"Reconciliation completed in {duration:.2f}s: {summarize(outcomes)}")
        return outcomes

    async def _reconcile_one(self, spec: ResourceSpec, failed_networks: Set[str]) -> ResourceOutcome:
        provider = self.provider_registry.get_provider(spec.kind)
        if provider is None:
            return self._failed(spec, f"no provider for {spec.kind}")

        if spec.kind == "container" and spec.network in failed_networks:
            return self._failed(spec, f"network '{spec.network}' did not converge")

        if not await provider.validate_spec(spec):
            return self._failed(spec, "invalid specification")

        try:
            outcome = await provider.present(spec)
        except Exception as e:
            error = ResourceReconcileError(spec.kind, spec.name, str(e))
            logger.error(str(error))
            return self._failed(spec, str(e))

        warnings = list(getattr(provider, "warnings", []))
        return ResourceOutcome(spec.kind, spec.name, outcome, warnings=warnings)

    @staticmethod
    def _failed(spec: ResourceSpec, reason: str) -> ResourceOutcome:
        logger.error(f"{spec.kind} '{spec.name}' failed: {reason}")
        return ResourceOutcome(spec.kind, spec.name, Outcome.FAILED, reason=reason)


def check_identities(specs: Sequence[ResourceSpec]) -> None:
    """Reject inventories naming the same resource twice."""
    seen: Set[tuple] = set()
    for spec in specs:
        key = (spec.kind, spec.name)
        if key in seen:
            raise ValueError(f"Duplicate {spec.kind} '{spec.name}' in inventory")
        seen.add(key)


def processing_order(specs: Sequence[ResourceSpec]) -> List[ResourceSpec]:
    """Declaration order, except that a container waits for a network declared after it."""
    declared_networks = {spec.name for spec in specs if spec.kind == "network"}
    seen_networks: Set[str] = set()
    deferred: Dict[str, List[ResourceSpec]] = {}
    ordered: List[ResourceSpec] = []

    for spec in specs:
        if (
            spec.kind == "container"
            and spec.network in declared_networks
            and spec.network not in seen_networks
        ):
            deferred.setdefault(spec.network, []).append(spec)
            continue
        ordered.append(spec)
        if spec.kind == "network":
            seen_networks.add(spec.name)
            ordered.extend(deferred.pop(spec.name, []))

    return ordered


def summarize(outcomes: Sequence[ResourceOutcome]) -> str:
    counts = Counter(outcome.outcome.value for outcome in outcomes)
    return ", ".join(f"{counts[o.value]} {o.value}" for o in Outcome if counts[o.value])


def all_converged(outcomes: Sequence[ResourceOutcome]) -> bool:
    return all(outcome.converged for outcome in outcomes)


async def create_reconciler(engine) -> Reconciler:
    """Reconciler backed by the default providers for the given engine."""
    registry = ProviderRegistry()
    await registry.initialize(engine)
    return Reconciler(registry)
