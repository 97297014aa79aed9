"""
A three-service graph used across tests.

    ingest  ──document-bucket──▶  process  ──processed-bucket──▶  embed

``process`` creates its output storage while it is being wired, so
``embed`` can only be wired after it.
"""

from __future__ import annotations

from collections.abc import Sequence

from rag_contracts.core.models import (
    Build,
    Consumer,
    Enver,
    NodeRef,
    NodeSpec,
    Producer,
    SrcRevRef,
    WiredConsumer,
    WiredProducer,
)
from rag_contracts.core.registry import ContractsRegistry

ACCOUNT = "111"
REGION = "us-east-1"


class DocumentStore(Producer):
    layout = (
        NodeSpec(path_part="document-bucket"),
        NodeSpec(path_part="schema", schema_artifact=True),
    )
    document_bucket = NodeRef("document-bucket")
    schema = NodeRef("schema")


class ProcessedStore(Producer):
    layout = (NodeSpec(path_part="processed-content-bucket"),)
    processed_content_bucket = NodeRef("processed-content-bucket")


class _SingleEnverBuild(Build):
    build_id_default = ""
    enver_class: type[Enver] = Enver

    def __init__(self, contracts: ContractsRegistry) -> None:
        super().__init__(contracts, self.build_id_default)

    def initialize_envers(self) -> Sequence[Enver]:
        return [self.enver_class(self, "dev", ACCOUNT, REGION, SrcRevRef(type="b", value="dev"))]

    @property
    def dev(self):
        return self.envers[0]


class IngestEnver(Enver):
    def __init__(self, *args) -> None:
        super().__init__(*args)
        self.store = DocumentStore(self, "store")


class ProcessEnver(Enver):
    documents = WiredConsumer()
    output = WiredProducer()

    def __init__(self, *args) -> None:
        super().__init__(*args)
        self.identity = self.create_identity("processor")

    def wire(self) -> None:
        ingest = self.contracts.get_build("ingest").dev
        self.documents = Consumer(self, "documents", ingest.store.document_bucket)
        self.output = ProcessedStore(self, "output")


class EmbedEnver(Enver):
    processed = WiredConsumer()

    def wire(self) -> None:
        process = self.contracts.get_build("process").dev
        self.processed = Consumer(
            self, "processed", process.output.processed_content_bucket
        )


class IngestBuild(_SingleEnverBuild):
    build_id_default = "ingest"
    namespace = "ingest"
    enver_class = IngestEnver


class ProcessBuild(_SingleEnverBuild):
    build_id_default = "process"
    namespace = "process"
    enver_class = ProcessEnver


class EmbedBuild(_SingleEnverBuild):
    build_id_default = "embed"
    namespace = "embed"
    enver_class = EmbedEnver
    wiring_dependencies = ("process",)


PIPELINE = (IngestBuild, ProcessBuild, EmbedBuild)


def make_registry(builds=PIPELINE, wire: bool = True) -> ContractsRegistry:
    return ContractsRegistry(builds=builds, wire=wire)
