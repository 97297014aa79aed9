"""
Two-phase resolution — symbolic edges now, concrete values at deploy time.

Graph construction only ever produces ``Edge`` objects.  Turning an edge
into a ``ResolvedValue`` is the deployment platform's job; here it is
modeled by the ``SharedValueSource`` protocol so the behavior around
fallbacks can be specified and tested:

    producer value present           → origin "producer"
    no value, target never deployed  → fallback, origin "bootstrap"
    no value, target deployed        → fallback, origin "masking" (WARNING)
    no value, no fallback            → UnresolvedValueError
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from rag_contracts.core.errors import UnresolvedValueError

logger = logging.getLogger(__name__)


class Propagation(str, Enum):
    """Whether a new value at the target redeploys the consumer's environment."""

    DIRECT = "direct"
    NONE = "none"


class ValueOrigin(str, Enum):
    PRODUCER = "producer"
    BOOTSTRAP = "bootstrap"
    MASKING = "masking"


@dataclass(frozen=True)
class Edge:
    """A build-time consumer → producer-node reference."""

    consumer_address: str
    owner_address: str
    target_address: str
    target_owner_address: str
    fallback_value: str | None = None
    propagation: Propagation = Propagation.DIRECT

    @property
    def has_fallback(self) -> bool:
        return self.fallback_value is not None

    def to_dict(self) -> dict:
        return {
            "consumer": self.consumer_address,
            "owner": self.owner_address,
            "target": self.target_address,
            "target_owner": self.target_owner_address,
            "fallback": self.fallback_value,
            "propagation": self.propagation.value,
        }


@dataclass(frozen=True)
class ResolvedValue:
    """A deploy-time value for one edge."""

    edge: Edge
    value: str
    origin: ValueOrigin = ValueOrigin.PRODUCER

    @property
    def used_fallback(self) -> bool:
        return self.origin is not ValueOrigin.PRODUCER

    def to_dict(self) -> dict:
        return {
            "consumer": self.edge.consumer_address,
            "target": self.edge.target_address,
            "value": self.value,
            "origin": self.origin.value,
        }


class SharedValueSource(Protocol):
    """What the deployment platform offers for value lookup."""

    def get_shared_value(self, edge: Edge) -> str | None:
        """Current value published at ``edge.target_address``, if any."""
        ...

    def has_deployed(self, enver_address: str) -> bool:
        """Whether the environment at ``enver_address`` ever deployed."""
        ...


@dataclass
class InMemoryValueSource:
    """Value source backed by plain dicts (tests, CLI value files)."""

    values: dict[str, str] = field(default_factory=dict)
    deployed: set[str] = field(default_factory=set)

    def publish(self, node_address: str, value: str, enver_address: str | None = None) -> None:
        self.values[node_address] = value
        if enver_address:
            self.deployed.add(enver_address)

    def mark_deployed(self, enver_address: str) -> None:
        self.deployed.add(enver_address)

    def get_shared_value(self, edge: Edge) -> str | None:
        return self.values.get(edge.target_address)

    def has_deployed(self, enver_address: str) -> bool:
        return enver_address in self.deployed


def resolve_edge(edge: Edge, source: SharedValueSource) -> ResolvedValue:
    """Resolve one edge against ``source``.

    Raises:
        UnresolvedValueError: No value is published and the edge has no fallback.
    """
    value = source.get_shared_value(edge)
    if value is not None:
        return ResolvedValue(edge=edge, value=value)

    fallback = edge.fallback_value
    if fallback is None:
        raise UnresolvedValueError(
            f"No value for {edge.target_address} (consumed by {edge.consumer_address}) "
            "and no fallback declared"
        )

    if source.has_deployed(edge.target_owner_address):
        logger.warning(
            "Fallback '%s' masks a missing value: %s deployed but never published %s",
            fallback,
            edge.target_owner_address,
            edge.target_address,
        )
        origin = ValueOrigin.MASKING
    else:
        logger.info(
            "Bootstrap fallback '%s' for %s (%s not deployed yet)",
            fallback,
            edge.consumer_address,
            edge.target_owner_address,
        )
        origin = ValueOrigin.BOOTSTRAP

    return ResolvedValue(edge=edge, value=fallback, origin=origin)
