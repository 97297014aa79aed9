"""
Producer — a resource tree owned by exactly one environment.

Concrete producers declare their tree once as a class-level ``layout``
and expose each node through a ``NodeRef`` accessor:

    class EmbeddingStorageProducer(Producer):
        layout = (
            NodeSpec(path_part="embeddings-bucket"),
            NodeSpec(path_part="embedding-status-bucket"),
        )
        embeddings_bucket = NodeRef("embeddings-bucket")

Accessor paths are checked against the layout when the class is
defined, so a typo fails at import time instead of at wiring time.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from typing import TYPE_CHECKING, ClassVar

from rag_contracts.core.models.resource import NodeSpec, ResourceNode

if TYPE_CHECKING:
    from rag_contracts.core.models.enver import Enver

logger = logging.getLogger(__name__)


class NodeRef:
    """Named accessor for a node declared in a producer's layout."""

    def __init__(self, path: str) -> None:
        self.path = path
        self.attr = ""

    def __set_name__(self, owner: type, name: str) -> None:
        self.attr = name

    def __get__(self, producer: Producer | None, objtype: type | None = None):
        if producer is None:
            return self
        return producer.root.find(self.path)


class Producer:
    """Everything one environment exposes under a single producer id.

    Producers created while their environment is being wired are
    "wiring-time" producers: other environments may only consume them
    after the owner has finished wiring.
    """

    layout: ClassVar[tuple[NodeSpec, ...]] = ()

    def __init_subclass__(cls, **kwargs) -> None:
        super().__init_subclass__(**kwargs)
        declared = NodeSpec(path_part="root", children=list(cls.layout))
        for name, value in vars(cls).items():
            if isinstance(value, NodeRef) and not declared.has_path(value.path):
                raise TypeError(
                    f"{cls.__name__}.{name} refers to '{value.path}', "
                    "which is not declared in the layout"
                )

    def __init__(
        self,
        owner: Enver,
        producer_id: str,
        children: Sequence[NodeSpec] | None = None,
    ) -> None:
        self.owner = owner
        self.producer_id = producer_id
        spec = NodeSpec(
            path_part=producer_id,
            children=list(children if children is not None else self.layout),
        )
        self.root = ResourceNode(self, spec)
        self.wiring_time = owner.is_wiring
        owner.register_producer(self)
        logger.debug("Producer %s created (%d nodes)", self.address, self.node_count)

    @property
    def address(self) -> str:
        return self.root.address

    @property
    def children(self) -> tuple[ResourceNode, ...]:
        return self.root.children

    @property
    def node_count(self) -> int:
        return sum(1 for _ in self.root.walk())

    def child(self, segment: str) -> ResourceNode:
        return self.root.child(segment)

    def node(self, path: str) -> ResourceNode:
        """Resolve a path relative to the producer root (empty → root)."""
        if not path:
            return self.root
        return self.root.find(path)

    def walk(self) -> Iterator[ResourceNode]:
        return self.root.walk()

    def __getitem__(self, index: int) -> ResourceNode:
        return self.root[index]

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.address}>"

    def to_dict(self) -> dict:
        return {
            "id": self.producer_id,
            "type": type(self).__name__,
            "wiring_time": self.wiring_time,
            "tree": self.root.to_dict(),
        }
