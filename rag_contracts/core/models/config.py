"""
Contracts configuration — accounts and repositories, loaded from contracts.yml.

Every field has a default matching the production RAG platform, so an
empty (or missing) contracts.yml is a valid configuration.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from rag_contracts.core.errors import MissingConfigurationError

GH_APP_INSTALL_ID = 69236037


def _default_accounts() -> dict[str, str]:
    return {
        "central": "877679826644",      # central management account
        "workspace0": "447839931803",   # builtin workspace
        "workspace1": "366920167720",   # dev workspace
        "workspace2": "217471730138",   # production workspace
    }


def _repo(name: str, owner: str = "odmd-rag") -> GithubRepo:
    return GithubRepo(owner=owner, name=name, gh_app_install_id=GH_APP_INSTALL_ID)


def _default_repos() -> dict[str, GithubRepo]:
    return {
        "__contracts": _repo("contractsLib-rag"),
        "__userAuth": _repo("user-auth"),
        "ragDocumentIngestion": _repo("rag-document-ingestion-service"),
        "ragDocumentProcessing": _repo("rag-document-processing-service"),
        "ragEmbedding": _repo("rag-embedding-service"),
        "ragVectorStorage": _repo("rag-vector-storage-service"),
        "ragKnowledgeRetrieval": _repo("rag-knowledge-retrieval-service"),
        "ragGeneration": _repo("rag-generation-service"),
    }


class GithubRepo(BaseModel):
    """A GitHub repository a build deploys from."""

    owner: str
    name: str
    gh_app_install_id: int | None = None

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


class ContractsConfig(BaseModel):
    """Root configuration for the contract registry."""

    version: int = 1

    accounts: dict[str, str] = Field(default_factory=_default_accounts)
    github_app_id: str = "1351746"
    github_repos: dict[str, GithubRepo] = Field(default_factory=_default_repos)
    default_region: str = "us-east-2"

    @field_validator("accounts")
    @classmethod
    def _one_to_one(cls, v: dict[str, str]) -> dict[str, str]:
        numbers = list(v.values())
        dupes = sorted({n for n in numbers if numbers.count(n) > 1})
        if dupes:
            raise ValueError(
                "Account name to number mapping must be 1:1, "
                f"duplicated: {', '.join(dupes)}"
            )
        for name, number in v.items():
            if not number.isdigit():
                raise ValueError(f"Account '{name}' is not numeric: {number}")
        return v

    @property
    def all_accounts(self) -> list[str]:
        return list(self.accounts.values())

    def account(self, name: str) -> str:
        """Look up an account number by its alias.

        Raises:
            MissingConfigurationError: If the alias is not configured.
        """
        try:
            return self.accounts[name]
        except KeyError:
            raise MissingConfigurationError(f"No account '{name}' configured") from None

    def repo(self, key: str) -> GithubRepo:
        """Look up a repository by key.

        Raises:
            MissingConfigurationError: If the key is not configured.
        """
        try:
            return self.github_repos[key]
        except KeyError:
            raise MissingConfigurationError(f"No GitHub repo '{key}' configured") from None
