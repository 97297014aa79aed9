"""
Shared values file — a JSON stand-in for the platform's value store.

The deployment platform publishes a value for every producer node once
its environment deploys.  Locally that store is a JSON document:

    {
      "values":   {"ragEmbedding/dev/embedding-storage/embeddings-bucket": "emb-dev"},
      "deployed": ["ragEmbedding/dev"],
      "updated_at": "2026-01-01T00:00:00+00:00"
    }

Writes are atomic (write to temp file, then rename).
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from rag_contracts.core.errors import ConfigError
from rag_contracts.core.resolution import InMemoryValueSource

logger = logging.getLogger(__name__)

DEFAULT_VALUES_FILE = "shared-values.json"


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class SharedValuesDocument(BaseModel):
    """Published values keyed by node address, plus deployed envers."""

    values: dict[str, str] = Field(default_factory=dict)
    deployed: list[str] = Field(default_factory=list)
    updated_at: str = Field(default_factory=_now_iso)

    def touch(self) -> None:
        self.updated_at = _now_iso()

    def publish(self, node_address: str, value: str) -> None:
        self.values[node_address] = value

    def mark_deployed(self, enver_address: str) -> None:
        if enver_address not in self.deployed:
            self.deployed.append(enver_address)

    def to_source(self) -> InMemoryValueSource:
        return InMemoryValueSource(values=dict(self.values), deployed=set(self.deployed))


def load_values(path: Path, strict: bool = False) -> SharedValuesDocument:
    """Load a shared values file.

    Args:
        path: The JSON file.
        strict: Raise on an unreadable file instead of starting empty.
            Callers that save the document back pass True, so a corrupt
            file is never overwritten.

    Returns:
        The document.  A missing file yields an empty one, as does an
        unreadable one unless ``strict``.

    Raises:
        ConfigError: ``strict`` and the file exists but cannot be parsed.
    """
    if not path.is_file():
        logger.info("No values file at %s — starting empty", path)
        return SharedValuesDocument()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        doc = SharedValuesDocument.model_validate(data)
    except (json.JSONDecodeError, ValidationError, OSError) as e:
        if strict:
            raise ConfigError(f"Corrupt values file {path}: {e}") from e
        logger.warning("Corrupt values file %s: %s — starting empty", path, e)
        return SharedValuesDocument()

    logger.debug("Loaded %d values from %s", len(doc.values), path)
    return doc


def save_values(doc: SharedValuesDocument, path: Path) -> None:
    """Save a shared values file (atomic write)."""
    doc.touch()
    path.parent.mkdir(parents=True, exist_ok=True)

    content = json.dumps(doc.model_dump(mode="json"), indent=2, ensure_ascii=False) + "\n"

    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=".values_", suffix=".tmp")
    os.close(fd)
    tmp = Path(tmp_path)
    try:
        tmp.write_text(content, encoding="utf-8")
        tmp.replace(path)
    except OSError as e:
        tmp.unlink(missing_ok=True)
        logger.error("Failed to save values to %s: %s", path, e)
        raise
    logger.debug("Values saved to %s", path)
