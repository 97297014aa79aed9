"""
Shared test fixtures and configuration.
"""

from pathlib import Path

import pytest

from rag_contracts.core import context


@pytest.fixture(autouse=True)
def build_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Every test starts with no registry and a complete build environment."""
    context.reset_registry()
    monkeypatch.setenv("CDK_CLI_VERSION", "2.0.0")
    monkeypatch.setenv("CDK_DEFAULT_REGION", "us-east-1")
    monkeypatch.setenv("CDK_DEFAULT_ACCOUNT", "123456789012")
    monkeypatch.delenv("CODEBUILD_BUILD_ARN", raising=False)
    yield
    context.reset_registry()


@pytest.fixture
def rag():
    """The fully wired RAG contracts."""
    from rag_contracts.services.contracts import RagContracts

    return RagContracts()


@pytest.fixture
def no_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run from a directory with no contracts.yml above it."""
    monkeypatch.chdir(tmp_path)
    return tmp_path
