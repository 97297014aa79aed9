"""
Shared pieces of the RAG service builds.

Most services deploy the same way: a ``dev`` enver tracking the ``dev``
branch in workspace1 and a ``prod`` enver tracking ``main`` in
workspace2.  Pipeline services also expose a status API, which the
ingestion service aggregates for its UI.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, ClassVar, cast

from rag_contracts.core.models import (
    Build,
    Enver,
    NodeRef,
    NodeSpec,
    Producer,
    SrcRevRef,
)

if TYPE_CHECKING:
    from rag_contracts.core.registry import ContractsRegistry
    from rag_contracts.services.contracts import RagContracts


class StatusApiProducer(Producer):
    """Status endpoint a pipeline service publishes for the ingestion UI."""

    layout = (
        NodeSpec(path_part="status-api-endpoint"),
        NodeSpec(path_part="status-response-schema", schema_artifact=True),
    )

    status_endpoint = NodeRef("status-api-endpoint")
    status_response_schema = NodeRef("status-response-schema")


class RagEnver(Enver):
    """Enver of a RAG service; reaches sibling builds through ``rag``."""

    @property
    def rag(self) -> RagContracts:
        return cast("RagContracts", self.contracts)


class RagServiceBuild(Build):
    """A service build with the standard dev/prod envers."""

    BUILD_ID: ClassVar[str] = ""
    REPO_KEY: ClassVar[str] = ""
    enver_class: ClassVar[type[RagEnver]] = RagEnver

    def __init__(self, contracts: ContractsRegistry) -> None:
        super().__init__(contracts, self.BUILD_ID, contracts.config.repo(self.REPO_KEY))

    def initialize_envers(self) -> Sequence[Enver]:
        config = self.contracts.config
        return [
            self.enver_class(
                self,
                "dev",
                config.account("workspace1"),
                config.default_region,
                SrcRevRef(type="b", value="dev"),
            ),
            self.enver_class(
                self,
                "prod",
                config.account("workspace2"),
                config.default_region,
                SrcRevRef(type="b", value="main"),
            ),
        ]

    @property
    def dev(self) -> Enver:
        return self.enver("dev")

    @property
    def prod(self) -> Enver:
        return self.enver("prod")
