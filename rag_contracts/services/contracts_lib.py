"""
The contracts library's own build — publishes this package.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from rag_contracts.core.models import Build, Enver, SrcRevRef

if TYPE_CHECKING:
    from rag_contracts.core.registry import ContractsRegistry

NAMESPACE = "contracts-lib"


class ContractsLibBuild(Build):
    BUILD_ID = "rag-contracts-npm"
    REPO_KEY = "__contracts"
    namespace = NAMESPACE

    package_name = "@odmd-rag/contracts-lib-rag"
    pkg_org = "@odmd-rag"

    def __init__(self, contracts: ContractsRegistry) -> None:
        super().__init__(contracts, self.BUILD_ID, contracts.config.repo(self.REPO_KEY))

    def initialize_envers(self) -> Sequence[Enver]:
        config = self.contracts.config
        return [
            Enver(
                self,
                "main",
                config.account("workspace0"),
                config.default_region,
                SrcRevRef(type="b", value="main"),
            )
        ]
