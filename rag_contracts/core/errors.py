"""
Error taxonomy for the contract graph.

Every error here is a synthesis-time error: the graph is declarative,
so there is nothing to retry.  Fix the declarations and re-run.
Messages always carry the offending node, edge or build identity.
"""

from __future__ import annotations


class ContractsError(Exception):
    """Base class for every contract-graph error."""


class ConfigError(ContractsError):
    """Raised when contracts configuration is invalid or missing."""


class MissingConfigurationError(ConfigError):
    """Required account/region/CLI-version context is absent."""


class DuplicateRegistrationError(ContractsError):
    """Two builds share an id or identity, or a second registry was created."""


class UnresolvedReferenceError(ContractsError):
    """A consumer addresses a producer or node that does not exist (yet)."""


class SelfReferenceError(ContractsError):
    """A consumer targets a producer owned by its own environment."""


class NamingConventionViolation(ContractsError):
    """An identity was created outside its service's hierarchical namespace."""


class LifecycleError(ContractsError):
    """A build or environment was used in the wrong lifecycle state."""


class WiringCycleError(ContractsError):
    """The declared wiring dependencies contain a cycle."""

    def __init__(self, cycle: list[str]) -> None:
        self.cycle = cycle
        super().__init__("Wiring cycle detected: " + " → ".join(cycle))


class UnresolvedValueError(ContractsError):
    """Deploy-time: an edge has no shared value and no fallback."""
