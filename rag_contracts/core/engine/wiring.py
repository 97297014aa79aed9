"""
Wiring engine — order builds by their declared dependencies, then wire them.

Each build declares ``wiring_dependencies``: the builds whose wiring must
finish before its own starts (because it consumes producers they only
create while being wired).  The plan is a stable topological sort of
that edge list: among the builds that are ready, registration order
wins.  A cycle is reported with the builds that form it.

Flow:
    builds → plan (sort + cycle check) → execute (wire in order) → report
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from rag_contracts.core.errors import (
    DuplicateRegistrationError,
    UnresolvedReferenceError,
    WiringCycleError,
)
from rag_contracts.core.models.build import Build

logger = logging.getLogger(__name__)


@dataclass
class WiringPlan:
    """The order builds will be wired in."""

    order: list[Build] = field(default_factory=list)
    dependencies: dict[str, tuple[str, ...]] = field(default_factory=dict)

    @property
    def build_ids(self) -> list[str]:
        return [b.build_id for b in self.order]

    def to_dict(self) -> dict:
        return {
            "order": self.build_ids,
            "dependencies": {k: list(v) for k, v in self.dependencies.items()},
        }


@dataclass
class WiringReport:
    """Result of executing a plan."""

    order: list[str] = field(default_factory=list)
    consumers: dict[str, int] = field(default_factory=dict)

    @property
    def total_consumers(self) -> int:
        return sum(self.consumers.values())

    def to_dict(self) -> dict:
        return {
            "order": self.order,
            "consumers": self.consumers,
            "total_consumers": self.total_consumers,
        }


def plan_wiring(builds: Sequence[Build]) -> WiringPlan:
    """Compute a wiring order that honors every declared dependency.

    Raises:
        UnresolvedReferenceError: A build depends on an unknown build id.
        WiringCycleError: The declared dependencies contain a cycle.
    """
    by_id = {b.build_id: b for b in builds}
    deps: dict[str, tuple[str, ...]] = {}
    for build in builds:
        for dep in build.wiring_dependencies:
            if dep not in by_id:
                raise UnresolvedReferenceError(
                    f"Build '{build.build_id}' declares a wiring dependency on "
                    f"unknown build '{dep}'"
                )
        deps[build.build_id] = tuple(build.wiring_dependencies)

    done: set[str] = set()
    order: list[Build] = []
    remaining = list(builds)
    while remaining:
        ready = next(
            (b for b in remaining if all(d in done for d in deps[b.build_id])),
            None,
        )
        if ready is None:
            raise WiringCycleError(_find_cycle([b.build_id for b in remaining], deps))
        order.append(ready)
        done.add(ready.build_id)
        remaining.remove(ready)

    plan = WiringPlan(order=order, dependencies=deps)
    logger.info("Wiring order: %s", " → ".join(plan.build_ids))
    return plan


def plan_from_order(builds: Sequence[Build], build_ids: Sequence[str]) -> WiringPlan:
    """A plan with a caller-chosen order (no sorting, no cycle check).

    ``build_ids`` must name every registered build exactly once.

    Raises:
        UnresolvedReferenceError: An id is unknown, or a build is left out.
        DuplicateRegistrationError: An id appears more than once.
    """
    by_id = {b.build_id: b for b in builds}
    unknown = [i for i in build_ids if i not in by_id]
    if unknown:
        raise UnresolvedReferenceError(f"No build '{unknown[0]}' to wire")
    repeated = sorted({i for i in build_ids if list(build_ids).count(i) > 1})
    if repeated:
        raise DuplicateRegistrationError(
            f"Wiring order names builds more than once: {', '.join(repeated)}"
        )
    missing = [b.build_id for b in builds if b.build_id not in build_ids]
    if missing:
        raise UnresolvedReferenceError(
            f"Wiring order leaves out builds: {', '.join(missing)}"
        )

    order = [by_id[i] for i in build_ids]
    return WiringPlan(
        order=order,
        dependencies={b.build_id: tuple(b.wiring_dependencies) for b in builds},
    )


def execute_plan(plan: WiringPlan) -> WiringReport:
    """Wire every build in plan order.

    The first failure propagates; builds after it stay unwired.
    """
    report = WiringReport()
    for build in plan.order:
        logger.debug("Wiring build %s", build.build_id)
        build.wire_consuming()
        report.order.append(build.build_id)
        report.consumers[build.build_id] = build.consumer_count()
        logger.info("%s", build.build_id)
    return report


def _find_cycle(candidates: list[str], deps: dict[str, tuple[str, ...]]) -> list[str]:
    """Return one cycle among ``candidates`` as ``[a, b, ..., a]``."""
    pending = set(candidates)
    path: list[str] = []
    node = candidates[0]
    # Every pending build has at least one pending dependency, so
    # following the first one must eventually revisit the path.
    while node not in path:
        path.append(node)
        node = next(d for d in deps[node] if d in pending)
    return path[path.index(node):] + [node]
