"""
Config check use case — validate contracts.yml and the build environment.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from rag_contracts.core.config.environment import BuildEnvironment
from rag_contracts.core.config.loader import ConfigError, find_config_file, load_config
from rag_contracts.core.models.config import ContractsConfig

# Aliases the RAG builds deploy to
REQUIRED_ACCOUNTS = ("central", "workspace0", "workspace1", "workspace2")

REQUIRED_REPOS = (
    "__contracts",
    "__userAuth",
    "ragDocumentIngestion",
    "ragDocumentProcessing",
    "ragEmbedding",
    "ragVectorStorage",
    "ragKnowledgeRetrieval",
    "ragGeneration",
)


@dataclass
class ConfigCheckResult:
    """Result of configuration validation."""

    valid: bool = False
    config: ContractsConfig | None = None
    config_path: Path | None = None
    environment: BuildEnvironment | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "config_path": str(self.config_path) if self.config_path else None,
            "errors": self.errors,
            "warnings": self.warnings,
            "account_count": len(self.config.accounts) if self.config else 0,
            "repo_count": len(self.config.github_repos) if self.config else 0,
            "environment": self.environment.model_dump() if self.environment else None,
        }


def check_config(config_path: Path | None = None) -> ConfigCheckResult:
    """Validate contracts configuration and report issues.

    Args:
        config_path: Optional explicit path to contracts.yml.

    Returns:
        ConfigCheckResult with validation status and any issues.
    """
    result = ConfigCheckResult()

    if config_path is None:
        config_path = find_config_file()
        if config_path is None:
            result.warnings.append("No contracts.yml found, using built-in defaults.")
    result.config_path = config_path

    try:
        config = load_config(config_path, search=False)
        result.config = config
    except ConfigError as e:
        result.errors.append(str(e))
        return result

    for alias in REQUIRED_ACCOUNTS:
        if alias not in config.accounts:
            result.errors.append(f"Missing account '{alias}'")

    for key in REQUIRED_REPOS:
        if key not in config.github_repos:
            result.errors.append(f"Missing GitHub repo '{key}'")

    for key, repo in config.github_repos.items():
        if repo.gh_app_install_id is None:
            result.warnings.append(f"Repo '{key}' ({repo.full_name}) has no GitHub app install id")

    try:
        result.environment = BuildEnvironment.from_env()
    except ConfigError as e:
        result.errors.append(str(e))

    if result.environment and result.environment.account not in config.all_accounts:
        result.warnings.append(
            f"Build account {result.environment.account} is not one of the configured accounts"
        )

    result.valid = len(result.errors) == 0
    return result
