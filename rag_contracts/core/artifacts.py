"""
Schema artifacts — revision-stamped pointers published at artifact nodes.

A node declared with ``schema_artifact=True`` publishes the location of
a JSON schema rather than a resource name.  The value follows one
convention so consumers can tell which revision they were built against:

    store://{location}/{artifact-name}-{revisionHash}.json
    store://rag-schemas/dev/schema-3f9c2e1.json

The contract graph does not fetch or validate the schema itself.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict

from rag_contracts.core.errors import NamingConventionViolation
from rag_contracts.core.models.resource import ResourceNode

SCHEME = "store://"
SUFFIX = ".json"

_URI_RE = re.compile(
    r"^store://(?P<location>[^\s]+)/(?P<name>[A-Za-z0-9][A-Za-z0-9._-]*?)"
    r"-(?P<revision>[0-9a-f]{7,40})\.json$"
)


class SchemaArtifactRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    location: str
    name: str
    revision: str

    @property
    def uri(self) -> str:
        return f"{SCHEME}{self.location.strip('/')}/{self.name}-{self.revision}{SUFFIX}"

    def __str__(self) -> str:
        return self.uri

    @classmethod
    def parse(cls, uri: str) -> SchemaArtifactRef:
        """Parse a ``store://.../{name}-{revisionHash}.json`` value.

        Raises:
            NamingConventionViolation: If ``uri`` does not follow the convention.
        """
        match = _URI_RE.match(uri)
        if not match:
            raise NamingConventionViolation(
                f"'{uri}' is not of the form "
                "'store://{location}/{artifact-name}-{revisionHash}.json'"
            )
        return cls(
            location=match.group("location"),
            name=match.group("name"),
            revision=match.group("revision"),
        )

    @classmethod
    def for_node(cls, node: ResourceNode, location: str, revision: str) -> SchemaArtifactRef:
        """The value ``node`` publishes for a given source revision.

        Raises:
            NamingConventionViolation: If ``node`` is not a schema artifact node.
        """
        if not node.is_schema_artifact:
            raise NamingConventionViolation(f"{node.address} is not a schema artifact node")
        return cls(location=location, name=node.path_segment, revision=revision)
