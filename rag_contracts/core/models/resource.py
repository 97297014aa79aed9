"""
Resource tree — the addressable artifacts a producer exposes.

A producer's tree is declared once (``NodeSpec``) and materialized into
``ResourceNode`` objects when the producer is constructed.  Nodes are
immutable afterwards.  Children are reachable both by path segment and
by their construction-time position, and the two always agree:

    store
    ├── document-bucket        store[0]  == store.child("document-bucket")
    ├── schema  (artifact)     store[1]
    └── quarantine             store[2]
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Sequence
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field, field_validator

from rag_contracts.core.errors import UnresolvedReferenceError

if TYPE_CHECKING:
    from rag_contracts.core.models.enver import Enver
    from rag_contracts.core.models.producer import Producer

PATH_SEPARATOR = "/"

_SEGMENT_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


class NodeSpec(BaseModel):
    """Declaration of one node (and its subtree) in a producer layout."""

    path_part: str
    schema_artifact: bool = False
    children: list[NodeSpec] = Field(default_factory=list)

    @field_validator("path_part")
    @classmethod
    def _check_segment(cls, v: str) -> str:
        if not _SEGMENT_RE.match(v):
            raise ValueError(f"invalid path segment '{v}'")
        return v

    @field_validator("children")
    @classmethod
    def _unique_children(cls, v: list[NodeSpec]) -> list[NodeSpec]:
        names = [c.path_part for c in v]
        dupes = sorted({n for n in names if names.count(n) > 1})
        if dupes:
            raise ValueError(f"duplicate sibling segments: {', '.join(dupes)}")
        return v

    def has_path(self, path: str) -> bool:
        """Whether ``path`` (relative to this node) is declared."""
        children = self.children
        for segment in path.split(PATH_SEPARATOR):
            found = next((c for c in children if c.path_part == segment), None)
            if found is None:
                return False
            children = found.children
        return True


NodeSpec.model_rebuild()


class ResourceNode:
    """One addressable artifact in a producer's tree."""

    def __init__(
        self,
        producer: Producer,
        spec: NodeSpec,
        parent: ResourceNode | None = None,
        index: int = 0,
    ) -> None:
        self.producer = producer
        self.path_segment = spec.path_part
        self.is_schema_artifact = spec.schema_artifact
        self.parent = parent
        self.index = index
        self._children: tuple[ResourceNode, ...] = tuple(
            ResourceNode(producer, child, parent=self, index=i)
            for i, child in enumerate(spec.children)
        )

    # ── Identity ─────────────────────────────────────────────────

    @property
    def owner(self) -> Enver:
        """The environment whose producer tree holds this node."""
        return self.producer.owner

    @property
    def segments(self) -> tuple[str, ...]:
        if self.parent is None:
            return (self.path_segment,)
        return self.parent.segments + (self.path_segment,)

    @property
    def path(self) -> str:
        """Path from the producer root, e.g. ``store/quarantine``."""
        return PATH_SEPARATOR.join(self.segments)

    @property
    def address(self) -> str:
        """Globally unique address: ``{build}/{enver}/{path}``."""
        return f"{self.owner.address}{PATH_SEPARATOR}{self.path}"

    @property
    def is_leaf(self) -> bool:
        return not self._children

    # ── Navigation ───────────────────────────────────────────────

    @property
    def children(self) -> tuple[ResourceNode, ...]:
        return self._children

    def child(self, segment: str) -> ResourceNode:
        """Look up a direct child by path segment.

        Raises:
            UnresolvedReferenceError: If no such child exists.
        """
        for node in self._children:
            if node.path_segment == segment:
                return node
        raise UnresolvedReferenceError(f"No node '{segment}' under {self.address}")

    def find(self, path: str | Sequence[str]) -> ResourceNode:
        """Resolve a relative path like ``processed-content-bus/feedback-schema``."""
        segments = path.split(PATH_SEPARATOR) if isinstance(path, str) else path
        node = self
        for segment in segments:
            node = node.child(segment)
        return node

    def walk(self) -> Iterator[ResourceNode]:
        """Yield this node and every descendant, depth-first, in order."""
        yield self
        for node in self._children:
            yield from node.walk()

    def __getitem__(self, index: int) -> ResourceNode:
        if not 0 <= index < len(self._children):
            raise UnresolvedReferenceError(
                f"{self.address} has {len(self._children)} children, no position {index}"
            )
        return self._children[index]

    def __iter__(self) -> Iterator[ResourceNode]:
        return iter(self._children)

    def __repr__(self) -> str:
        marker = " artifact" if self.is_schema_artifact else ""
        return f"<ResourceNode {self.address}{marker}>"

    def to_dict(self) -> dict:
        result: dict = {"path": self.path, "address": self.address}
        if self.is_schema_artifact:
            result["schema_artifact"] = True
        if self._children:
            result["children"] = [c.to_dict() for c in self._children]
        return result
