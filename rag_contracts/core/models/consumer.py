"""
Consumer — one environment's reference to another environment's node.

Consumers are only created while their owner is being wired, and they
are symbolic: ``edge`` is what the deployment platform keys its value
lookup on, ``resolve()`` is the deploy-time half.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rag_contracts.core.errors import (
    LifecycleError,
    SelfReferenceError,
    UnresolvedReferenceError,
)
from rag_contracts.core.models.producer import Producer
from rag_contracts.core.models.resource import ResourceNode
from rag_contracts.core.resolution import (
    Edge,
    Propagation,
    ResolvedValue,
    SharedValueSource,
    resolve_edge,
)

if TYPE_CHECKING:
    from rag_contracts.core.models.enver import Enver

logger = logging.getLogger(__name__)


class Consumer:
    """A cross-environment edge with an optional fallback value."""

    def __init__(
        self,
        owner: Enver,
        consumer_id: str,
        target: ResourceNode | Producer,
        fallback_value: str | None = None,
        propagation: Propagation = Propagation.DIRECT,
    ) -> None:
        if not owner.is_wiring:
            raise LifecycleError(
                f"Consumer '{consumer_id}' on {owner.address} created outside "
                f"wire_consuming() (state: {owner.state.value})"
            )

        node = target.root if isinstance(target, Producer) else target
        producer = node.producer
        target_owner = producer.owner

        if target_owner is owner:
            raise SelfReferenceError(
                f"Consumer '{consumer_id}' on {owner.address} targets its own "
                f"producer node {node.address}"
            )
        if not target_owner.has_producer(producer):
            raise UnresolvedReferenceError(
                f"Consumer '{consumer_id}' on {owner.address} targets {node.address}, "
                f"which is not registered with {target_owner.address}"
            )
        if producer.wiring_time and not target_owner.is_wired:
            raise UnresolvedReferenceError(
                f"Consumer '{consumer_id}' on {owner.address} reads {node.address} "
                f"before {target_owner.address} finished wiring"
            )
        if producer.wiring_time and not owner.build.waits_for(target_owner.build):
            raise UnresolvedReferenceError(
                f"Consumer '{consumer_id}' on {owner.address} reads wiring-time node "
                f"{node.address} but {owner.build.build_id} does not declare a wiring "
                f"dependency on {target_owner.build.build_id}"
            )

        self.owner = owner
        self.consumer_id = consumer_id
        self.target = node
        self.fallback_value = fallback_value
        self.propagation = propagation
        owner.register_consumer(self)
        logger.debug("Consumer %s → %s", self.address, node.address)

    @property
    def address(self) -> str:
        return f"{self.owner.address}/{self.consumer_id}"

    @property
    def target_owner(self) -> Enver:
        return self.target.owner

    @property
    def edge(self) -> Edge:
        return Edge(
            consumer_address=self.address,
            owner_address=self.owner.address,
            target_address=self.target.address,
            target_owner_address=self.target_owner.address,
            fallback_value=self.fallback_value,
            propagation=self.propagation,
        )

    def resolve(self, source: SharedValueSource) -> ResolvedValue:
        """Deploy-time lookup of this edge's value (see ``resolve_edge``)."""
        return resolve_edge(self.edge, source)

    def __repr__(self) -> str:
        return f"<Consumer {self.address} → {self.target.address}>"
