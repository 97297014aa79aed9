"""
Enver — one deployable instance of a service.

An enver is pinned to an account, a region and a source revision.  It
owns producers (created in its constructor, or while it is wired) and
consumers (created only while it is wired).

Lifecycle:

    UNCONSTRUCTED ──build registers it──▶ PRODUCERS_INITIALIZED
                  ──wire_consuming()────▶ WIRING ──▶ WIRED

``wire_consuming()`` runs exactly once and is driven by the owning
build; subclasses put their consumers in the ``wire()`` hook.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, ClassVar, Literal

from pydantic import BaseModel, ConfigDict

from rag_contracts.core.errors import (
    DuplicateRegistrationError,
    LifecycleError,
    NamingConventionViolation,
    UnresolvedReferenceError,
)
from rag_contracts.core.models.resource import ResourceNode
from rag_contracts.core.trust import IdentityName, TrustPattern, validate_identity

if TYPE_CHECKING:
    from rag_contracts.core.models.build import Build
    from rag_contracts.core.models.consumer import Consumer
    from rag_contracts.core.models.producer import Producer
    from rag_contracts.core.registry import ContractsRegistry

logger = logging.getLogger(__name__)

_STACK_NAME_RE = re.compile(r"[^A-Za-z0-9-]")


class LifecycleState(str, Enum):
    UNCONSTRUCTED = "unconstructed"
    PRODUCERS_INITIALIZED = "producers_initialized"
    WIRING = "wiring"
    WIRED = "wired"


class SrcRevRef(BaseModel):
    """Source revision an enver deploys from: a branch (``b``) or tag (``t``)."""

    model_config = ConfigDict(frozen=True)

    type: Literal["b", "t"]
    value: str

    def __str__(self) -> str:
        return f"{self.type}..{self.value}"


@dataclass(frozen=True)
class TrustGrant:
    """A producer node that accepts any identity matching ``pattern``."""

    node: ResourceNode
    pattern: TrustPattern

    def allows(self, identity: str | IdentityName) -> bool:
        return self.pattern.matches(identity)

    def to_dict(self) -> dict:
        return {"node": self.node.address, "pattern": self.pattern.scoped}


class WiredProducer:
    """Enver attribute for a producer that only exists once wiring ran.

    Reading it earlier is a wiring-order bug and raises instead of
    returning None.
    """

    def __set_name__(self, owner: type, name: str) -> None:
        self.attr = name

    def __get__(self, enver: Enver | None, objtype: type | None = None):
        if enver is None:
            return self
        raise UnresolvedReferenceError(
            f"{enver.address}.{self.attr} is not produced until "
            f"{enver.build.build_id} has been wired"
        )


class WiredConsumer:
    """Enver attribute for a consumer that only exists once wiring ran."""

    def __set_name__(self, owner: type, name: str) -> None:
        self.attr = name

    def __get__(self, enver: Enver | None, objtype: type | None = None):
        if enver is None:
            return self
        raise LifecycleError(
            f"{enver.address}.{self.attr} is read before {enver.address} was wired"
        )


class Enver:
    """A service environment: coordinates plus producers and consumers."""

    # Extra stack names deployed next to the main one (e.g. "-webUi")
    rev_stack_suffixes: ClassVar[tuple[str, ...]] = ()

    def __init__(
        self,
        build: Build,
        name: str,
        account: str,
        region: str,
        revision: SrcRevRef,
    ) -> None:
        self.build = build
        self.name = name
        self.account = account
        self.region = region
        self.revision = revision
        self.state = LifecycleState.UNCONSTRUCTED
        self._producers: dict[str, Producer] = {}
        self._consumers: dict[str, Consumer] = {}
        self._identities: dict[str, IdentityName] = {}
        self._grants: list[TrustGrant] = []

    # ── Identity ─────────────────────────────────────────────────

    @property
    def address(self) -> str:
        return f"{self.build.build_id}/{self.name}"

    @property
    def contracts(self) -> ContractsRegistry:
        return self.build.contracts

    @property
    def is_wiring(self) -> bool:
        return self.state is LifecycleState.WIRING

    @property
    def is_wired(self) -> bool:
        return self.state is LifecycleState.WIRED

    def rev_stack_names(self) -> list[str]:
        base = _STACK_NAME_RE.sub("-", f"{self.build.build_id}--{self.revision.value}")
        return [base] + [base + suffix for suffix in self.rev_stack_suffixes]

    # ── Producers ────────────────────────────────────────────────

    def register_producer(self, producer: Producer) -> None:
        if self.state not in (LifecycleState.UNCONSTRUCTED, LifecycleState.WIRING):
            raise LifecycleError(
                f"Producer '{producer.producer_id}' added to {self.address} "
                f"in state {self.state.value}"
            )
        if producer.producer_id in self._producers:
            raise DuplicateRegistrationError(
                f"Producer '{producer.producer_id}' registered twice on {self.address}"
            )
        self._producers[producer.producer_id] = producer

    def has_producer(self, producer: Producer) -> bool:
        return self._producers.get(producer.producer_id) is producer

    @property
    def producers(self) -> list[Producer]:
        return list(self._producers.values())

    def producer(self, producer_id: str) -> Producer:
        """Look up a producer by id.

        Raises:
            UnresolvedReferenceError: If the producer does not exist (yet).
        """
        try:
            return self._producers[producer_id]
        except KeyError:
            hint = "" if self.is_wired else " (not wired yet)"
            raise UnresolvedReferenceError(
                f"No producer '{producer_id}' on {self.address}{hint}"
            ) from None

    def node(self, path: str) -> ResourceNode:
        """Resolve ``{producer_id}/{path...}`` on this enver."""
        producer_id, _, rest = path.partition("/")
        return self.producer(producer_id).node(rest)

    # ── Consumers ────────────────────────────────────────────────

    def register_consumer(self, consumer: Consumer) -> None:
        if consumer.consumer_id in self._consumers:
            raise DuplicateRegistrationError(
                f"Consumer '{consumer.consumer_id}' registered twice on {self.address}"
            )
        self._consumers[consumer.consumer_id] = consumer

    @property
    def consumers(self) -> list[Consumer]:
        """Consumers of this enver; only readable once it is wired."""
        if not self.is_wired:
            raise LifecycleError(
                f"Consumers of {self.address} read in state {self.state.value}"
            )
        return list(self._consumers.values())

    # ── Identities & trust ───────────────────────────────────────

    def create_identity(self, component: str) -> IdentityName:
        """Name an identity this enver creates, under its service namespace."""
        raw = f"{self.build.namespace}/{component}-{self.account}-{self.region}"
        return self.declare_identity(raw)

    def declare_identity(self, raw: str) -> IdentityName:
        """Register an explicitly named identity.

        Raises:
            NamingConventionViolation: If ``raw`` is outside this service's
                namespace or is not ``{service}/{component}-{account}-{region}``.
        """
        identity = validate_identity(self.build.namespace, raw)
        if (identity.account, identity.region) != (self.account, self.region):
            raise NamingConventionViolation(
                f"Identity '{raw}' on {self.address} is not scoped to "
                f"{self.account}/{self.region}"
            )
        if identity.value in self._identities:
            raise DuplicateRegistrationError(
                f"Identity '{raw}' declared twice on {self.address}"
            )
        self._identities[identity.value] = identity
        return identity

    @property
    def identities(self) -> list[IdentityName]:
        return list(self._identities.values())

    def trust(
        self,
        node: ResourceNode,
        namespace: str,
        region_scoped: bool = True,
    ) -> TrustGrant:
        """Let every ``{namespace}/*`` identity in this account reach ``node``."""
        if node.owner is not self:
            raise UnresolvedReferenceError(
                f"{self.address} cannot grant access to {node.address}, "
                "which it does not own"
            )
        pattern = TrustPattern(
            namespace=namespace,
            account=self.account,
            region=self.region if region_scoped else None,
        )
        grant = TrustGrant(node=node, pattern=pattern)
        self._grants.append(grant)
        return grant

    @property
    def trust_grants(self) -> list[TrustGrant]:
        return list(self._grants)

    # ── Lifecycle ────────────────────────────────────────────────

    def mark_initialized(self) -> None:
        if self.state is not LifecycleState.UNCONSTRUCTED:
            raise LifecycleError(f"{self.address} initialized twice")
        self.state = LifecycleState.PRODUCERS_INITIALIZED

    def wire_consuming(self) -> None:
        """Create this enver's consumers (runs exactly once)."""
        if self.state is not LifecycleState.PRODUCERS_INITIALIZED:
            raise LifecycleError(
                f"wire_consuming() on {self.address} in state {self.state.value}"
            )
        self.state = LifecycleState.WIRING
        self.wire()
        self.state = LifecycleState.WIRED
        logger.debug(
            "Wired %s: %d consumers, %d producers",
            self.address,
            len(self._consumers),
            len(self._producers),
        )

    def wire(self) -> None:
        """Hook: create consumers and wiring-time producers."""

    # ── Serialization ────────────────────────────────────────────

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.address} {self.account}/{self.region}>"

    def to_dict(self) -> dict:
        return {
            "address": self.address,
            "account": self.account,
            "region": self.region,
            "revision": str(self.revision),
            "state": self.state.value,
            "rev_stack_names": self.rev_stack_names(),
            "producers": [p.to_dict() for p in self._producers.values()],
            "consumers": [c.edge.to_dict() for c in self._consumers.values()],
            "identities": [i.value for i in self._identities.values()],
            "trust_grants": [g.to_dict() for g in self._grants],
        }
