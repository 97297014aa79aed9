"""
Build — a named service with its repository identity and envers.

A build registers itself with the registry it is given, creates its
envers in ``initialize_envers()`` (which creates their producers), and
later wires them when the registry asks.  ``wiring_dependencies`` is the
declared edge list the registry sorts on: the ids of builds whose
wiring must complete before this one's starts.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, ClassVar

from rag_contracts.core.errors import (
    DuplicateRegistrationError,
    LifecycleError,
    UnresolvedReferenceError,
)
from rag_contracts.core.models.config import GithubRepo
from rag_contracts.core.models.enver import Enver, LifecycleState

if TYPE_CHECKING:
    from rag_contracts.core.registry import ContractsRegistry

logger = logging.getLogger(__name__)


class Build:
    """Base class for every service build."""

    # Hierarchical identity namespace: "{namespace}/{component}-{account}-{region}"
    namespace: ClassVar[str] = ""
    wiring_dependencies: ClassVar[tuple[str, ...]] = ()
    owner_email: ClassVar[str | None] = None

    def __init__(
        self,
        contracts: ContractsRegistry,
        build_id: str,
        repo: GithubRepo | None = None,
    ) -> None:
        if not self.namespace:
            raise TypeError(f"{type(self).__name__} must declare a namespace")
        self.contracts = contracts
        self.build_id = build_id
        self.repo = repo
        self.state = LifecycleState.UNCONSTRUCTED
        contracts.register_build(self)

        envers = list(self.initialize_envers())
        names = [e.name for e in envers]
        dupes = sorted({n for n in names if names.count(n) > 1})
        if dupes:
            raise DuplicateRegistrationError(
                f"Build '{build_id}' declares envers more than once: {', '.join(dupes)}"
            )
        self._envers: tuple[Enver, ...] = tuple(envers)
        for enver in self._envers:
            enver.mark_initialized()
        self.state = LifecycleState.PRODUCERS_INITIALIZED
        logger.debug("Build %s initialized with envers %s", build_id, names)

    def initialize_envers(self) -> Sequence[Enver]:
        """Create this build's envers (and, through them, their producers)."""
        raise NotImplementedError

    # ── Envers ───────────────────────────────────────────────────

    @property
    def envers(self) -> tuple[Enver, ...]:
        return self._envers

    def enver(self, name: str) -> Enver:
        for enver in self._envers:
            if enver.name == name:
                return enver
        raise UnresolvedReferenceError(f"Build '{self.build_id}' has no enver '{name}'")

    def counterpart(self, enver: Enver) -> Enver:
        """This build's enver playing the same role as ``enver`` (dev ↔ dev)."""
        return self.enver(enver.name)

    # ── Wiring ───────────────────────────────────────────────────

    @property
    def is_wired(self) -> bool:
        return self.state is LifecycleState.WIRED

    def waits_for(self, other: Build) -> bool:
        """Whether this build's wiring is declared to follow ``other``'s."""
        return other is self or other.build_id in self.wiring_dependencies

    def wire_consuming(self) -> None:
        """Wire every enver of this build (runs exactly once)."""
        if self.state is not LifecycleState.PRODUCERS_INITIALIZED:
            raise LifecycleError(
                f"wire_consuming() on build '{self.build_id}' in state {self.state.value}"
            )
        self.state = LifecycleState.WIRING
        for enver in self._envers:
            enver.wire_consuming()
        self.state = LifecycleState.WIRED

    def consumer_count(self) -> int:
        return sum(len(e.consumers) for e in self._envers)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.build_id}>"

    def to_dict(self) -> dict:
        return {
            "build_id": self.build_id,
            "type": type(self).__name__,
            "namespace": self.namespace,
            "repo": self.repo.model_dump() if self.repo else None,
            "state": self.state.value,
            "wiring_dependencies": list(self.wiring_dependencies),
            "envers": [e.to_dict() for e in self._envers],
        }
