"""
Registry context — the single slot holding "the contract registry".

The registry itself is an explicit object: builds receive it in their
constructor and read sibling builds through it.  This module only
enforces "exactly one per process":

    - Registry constructor:  context.claim_registry(self) before building,
                             context.set_registry(self) once wiring succeeded,
                             context.release_registry(self) if either failed
    - Callers:               context.get_registry()
    - Tests:                 conftest → context.reset_registry()

Design notes:
    - Module-level slot (not a class).
    - A claimed registry holds the slot from construction on, wired or
      not; only a published one is returned by get_registry().
    - A registry that fails mid-construction never lands in the slot,
      so no partial graph is ever visible.
    - Thread-safe for reads (Python GIL + simple reference assignment).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from rag_contracts.core.errors import DuplicateRegistrationError, LifecycleError

if TYPE_CHECKING:
    from rag_contracts.core.registry import ContractsRegistry


_claimed: Optional[ContractsRegistry] = None
_registry: Optional[ContractsRegistry] = None


def claim_registry(registry: ContractsRegistry) -> None:
    """Reserve the process slot for ``registry``.

    Raises:
        DuplicateRegistrationError: If another registry holds the slot,
            published or still under construction.
    """
    global _claimed
    if _claimed is not None:
        state = "existing" if _registry is not None else "under construction"
        raise DuplicateRegistrationError(
            f"{registry.name} is a singleton - not allowed to create multiple instances "
            f"({state}: {_claimed.name})"
        )
    _claimed = registry


def set_registry(registry: ContractsRegistry) -> None:
    """Publish a fully wired registry for the current process."""
    global _registry
    if _claimed is not registry:
        raise LifecycleError(f"{registry.name} was never claimed in this process")
    _registry = registry


def release_registry(registry: ContractsRegistry) -> None:
    """Give the slot back after ``registry`` failed to build."""
    global _claimed, _registry
    if _claimed is registry:
        _claimed = None
        _registry = None


def get_registry() -> Optional[ContractsRegistry]:
    """Return the current registry, or None if none has been published."""
    return _registry


def reset_registry() -> None:
    """Forget the current registry (test isolation only)."""
    global _claimed, _registry
    _claimed = None
    _registry = None
