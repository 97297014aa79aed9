"""
Contracts registry — builds every service, then wires them in order.

The registry is the explicit context object builds are constructed
with.  Construction is one synchronous pass:

    claim the process slot → read build environment → construct builds
    (envers + producers) → reject duplicates → plan wiring → wire →
    publish to the process slot

Any error aborts the pass; a registry is only published (and only
returned by ``context.get_registry()``) once it is fully wired.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Sequence

from rag_contracts.core import context
from rag_contracts.core.config.environment import BuildEnvironment
from rag_contracts.core.engine.wiring import (
    WiringPlan,
    WiringReport,
    execute_plan,
    plan_from_order,
    plan_wiring,
)
from rag_contracts.core.errors import (
    DuplicateRegistrationError,
    LifecycleError,
    UnresolvedReferenceError,
)
from rag_contracts.core.models.build import Build
from rag_contracts.core.models.config import ContractsConfig, GithubRepo
from rag_contracts.core.models.consumer import Consumer
from rag_contracts.core.models.enver import Enver, TrustGrant
from rag_contracts.core.models.resource import ResourceNode
from rag_contracts.core.resolution import Edge, Propagation
from rag_contracts.core.trust import IdentityName

logger = logging.getLogger(__name__)

BuildFactory = Callable[["ContractsRegistry"], Build]


class ContractsRegistry:
    """The process-wide contract graph."""

    name = "ContractsRegistry"

    def __init__(
        self,
        config: ContractsConfig | None = None,
        environment: BuildEnvironment | None = None,
        builds: Sequence[BuildFactory] | None = None,
        wire: bool = True,
    ) -> None:
        context.claim_registry(self)

        self.config = config or ContractsConfig()
        self._builds: list[Build] = []
        self.plan: WiringPlan | None = None
        self.report: WiringReport | None = None

        try:
            self.environment = environment or BuildEnvironment.from_env()
            factories = builds if builds is not None else self.default_builds()
            for factory in factories:
                factory(self)
            self._check_duplicates()
            self._check_trust_namespaces()
        except Exception:
            context.release_registry(self)
            raise

        logger.debug(
            "Registry %s constructed %d builds in %s/%s",
            self.name,
            len(self._builds),
            self.environment.account,
            self.environment.region,
        )

        if wire:
            self.wire()

    def default_builds(self) -> Sequence[BuildFactory]:
        """Build factories used when none are passed explicitly."""
        return ()

    # ── Construction ─────────────────────────────────────────────

    def register_build(self, build: Build) -> None:
        """Called by every build constructor."""
        if self.plan is not None:
            raise LifecycleError(
                f"Build '{build.build_id}' registered after wiring started"
            )
        self._builds.append(build)

    def _check_duplicates(self) -> None:
        seen_ids: set[str] = set()
        seen_objects: set[int] = set()
        dupes: list[str] = []
        for build in self._builds:
            if build.build_id in seen_ids or id(build) in seen_objects:
                dupes.append(build.build_id)
            seen_ids.add(build.build_id)
            seen_objects.add(id(build))
        if dupes:
            raise DuplicateRegistrationError(
                f"Duplicated builds detected: {', '.join(sorted(set(dupes)))}"
            )

        namespaces: dict[str, str] = {}
        for build in self._builds:
            other = namespaces.setdefault(build.namespace, build.build_id)
            if other != build.build_id:
                raise DuplicateRegistrationError(
                    f"Builds '{other}' and '{build.build_id}' share the identity "
                    f"namespace '{build.namespace}'"
                )

    def _check_trust_namespaces(self) -> None:
        known = {b.namespace for b in self._builds}
        for grant in self.trust_grants():
            if grant.pattern.namespace not in known:
                raise UnresolvedReferenceError(
                    f"{grant.node.address} trusts '{grant.pattern.prefix}', "
                    "but no registered build owns that namespace"
                )

    # ── Wiring ───────────────────────────────────────────────────

    def wire(self, order: Sequence[str] | None = None) -> WiringReport:
        """Wire every build, then publish the registry for the process.

        Args:
            order: Explicit build ids to wire in.  Default: the computed
                topological order.

        Raises:
            LifecycleError: If the registry was already wired.
            WiringCycleError: If the declared dependencies form a cycle.
            UnresolvedReferenceError: If a build reads a producer too early,
                or ``order`` misses or invents a build id.
            DuplicateRegistrationError: If ``order`` repeats a build id.

        On any failure the process slot is released and nothing is published.
        """
        if self.plan is not None:
            raise LifecycleError(f"Registry {self.name} wired twice")

        try:
            if order is None:
                self.plan = plan_wiring(self._builds)
            else:
                self.plan = plan_from_order(self._builds, order)
            self.report = execute_plan(self.plan)
            # Envers may grant trust while wiring
            self._check_trust_namespaces()

            unwired = [b.build_id for b in self._builds if not b.is_wired]
            if unwired:
                raise LifecycleError(
                    f"Registry {self.name} left builds unwired: {', '.join(unwired)}"
                )
        except Exception:
            self.report = None
            context.release_registry(self)
            raise

        context.set_registry(self)
        logger.info(
            "Registry %s wired: %d builds, %d consumers",
            self.name,
            len(self._builds),
            self.report.total_consumers,
        )
        return self.report

    @property
    def is_wired(self) -> bool:
        return self.report is not None

    # ── Configuration views ──────────────────────────────────────

    @property
    def accounts(self) -> dict[str, str]:
        return self.config.accounts

    @property
    def all_accounts(self) -> list[str]:
        return self.config.all_accounts

    @property
    def github_repos(self) -> dict[str, GithubRepo]:
        return self.config.github_repos

    # ── Lookups ──────────────────────────────────────────────────

    @property
    def builds(self) -> list[Build]:
        return list(self._builds)

    def get_build(self, build_id: str) -> Build:
        for build in self._builds:
            if build.build_id == build_id:
                return build
        raise UnresolvedReferenceError(f"No build '{build_id}' in {self.name}")

    def envers(self) -> Iterator[Enver]:
        for build in self._builds:
            yield from build.envers

    def get_enver(self, address: str) -> Enver:
        """Look up ``{build_id}/{enver_name}``."""
        build_id, _, name = address.partition("/")
        return self.get_build(build_id).enver(name)

    def get_node(self, address: str) -> ResourceNode:
        """Look up ``{build_id}/{enver_name}/{producer_id}/{path...}``."""
        parts = address.split("/", 2)
        if len(parts) < 3:
            raise UnresolvedReferenceError(f"'{address}' is not a node address")
        return self.get_enver(f"{parts[0]}/{parts[1]}").node(parts[2])

    def consumers(self) -> Iterator[Consumer]:
        for enver in self.envers():
            yield from enver.consumers

    def edges(self) -> list[Edge]:
        """Every consumer edge in the graph (only after wiring)."""
        if not self.is_wired:
            raise LifecycleError(f"Edges of {self.name} read before wiring")
        return [c.edge for c in self.consumers()]

    def edges_into(self, enver: Enver) -> list[Edge]:
        """Edges owned by ``enver`` (what it consumes)."""
        return [c.edge for c in enver.consumers]

    def edges_from(self, node: ResourceNode) -> list[Edge]:
        """Edges that read ``node``."""
        return [e for e in self.edges() if e.target_address == node.address]

    def redeploy_targets(self, node: ResourceNode) -> list[Enver]:
        """Envers to redeploy when ``node`` publishes a new value.

        Only DIRECT edges propagate; NONE edges opted out.
        """
        targets: list[Enver] = []
        for edge in self.edges_from(node):
            if edge.propagation is not Propagation.DIRECT:
                continue
            enver = self.get_enver(edge.owner_address)
            if enver not in targets:
                targets.append(enver)
        return targets

    # ── Trust ────────────────────────────────────────────────────

    def trust_grants(self) -> list[TrustGrant]:
        return [g for enver in self.envers() for g in enver.trust_grants]

    def identities(self) -> list[IdentityName]:
        return [i for enver in self.envers() for i in enver.identities]

    def is_authorized(self, node: ResourceNode, identity: str | IdentityName) -> bool:
        """Whether any trust grant on ``node`` admits ``identity``."""
        return any(
            g.allows(identity) for g in node.owner.trust_grants if g.node is node
        )

    def grants_for(self, identity: str | IdentityName) -> list[TrustGrant]:
        """Every grant that admits ``identity``."""
        return [g for g in self.trust_grants() if g.allows(identity)]

    # ── Serialization ────────────────────────────────────────────

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "environment": self.environment.model_dump(),
            "accounts": self.accounts,
            "wiring": self.plan.to_dict() if self.plan else None,
            "builds": [b.to_dict() for b in self._builds],
        }
