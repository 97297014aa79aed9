"""
Configuration loader — reads contracts.yml into a ContractsConfig.

contracts.yml is optional: without one, the built-in accounts and
repositories apply.  When present it is validated against the Pydantic
schema and returned as a typed object.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from rag_contracts.core.errors import ConfigError
from rag_contracts.core.models.config import ContractsConfig

logger = logging.getLogger(__name__)

# Default config filename
CONTRACTS_CONFIG_FILE = "contracts.yml"

__all__ = ["CONTRACTS_CONFIG_FILE", "ConfigError", "find_config_file", "load_config"]


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for contracts.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to contracts.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONTRACTS_CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def load_config(path: Path | None = None, search: bool = True) -> ContractsConfig:
    """Load and validate contracts configuration.

    Args:
        path: Explicit path to contracts.yml.  If None and ``search`` is
            set, searches upward from the cwd; if nothing is found the
            built-in defaults are returned.
        search: Whether to search for a config file when ``path`` is None.

    Returns:
        Validated ContractsConfig.

    Raises:
        ConfigError: If an explicit file is missing, or any file is invalid.
    """
    if path is None and search:
        path = find_config_file()

    if path is None:
        logger.debug("No %s found — using built-in defaults", CONTRACTS_CONFIG_FILE)
        return ContractsConfig()

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading contracts config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # The YAML may wrap everything under a "contracts" key or be flat
    contracts_data = data.get("contracts", data)
    if not isinstance(contracts_data, dict):
        raise ConfigError(f"'contracts' in {path} must be a mapping")

    try:
        config = ContractsConfig.model_validate(contracts_data)
    except ValidationError as e:
        raise ConfigError(f"Invalid contracts configuration: {e}") from e

    logger.info(
        "Loaded contracts config from %s (%d accounts, %d repos)",
        path,
        len(config.accounts),
        len(config.github_repos),
    )
    return config
