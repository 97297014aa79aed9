"""
Document processing — turns uploaded documents into chunked content.

Processing reads ingestion's document bucket and, once it knows where
its input comes from, creates the processed-content storage the
embedding service polls.  That storage and the status API are created
during wiring, so embedding and ingestion must be wired after this build.
"""

from __future__ import annotations

from rag_contracts.core.models import (
    Build,
    Consumer,
    NodeRef,
    NodeSpec,
    Producer,
    SrcRevRef,
    WiredConsumer,
    WiredProducer,
)
from rag_contracts.services.base import RagEnver, RagServiceBuild, StatusApiProducer

NAMESPACE = "document-processing"
EMBEDDING_NAMESPACE = "embedding"


class ProcessedContentEventProducer(Producer):
    """EventBridge bus publishing "document processed" events."""

    layout = (
        NodeSpec(
            path_part="processed-content-bus",
            children=[
                NodeSpec(path_part="content-extracted-event-schema", schema_artifact=True),
                NodeSpec(path_part="content-chunked-event-schema", schema_artifact=True),
                NodeSpec(path_part="processing-failed-event-schema", schema_artifact=True),
                NodeSpec(path_part="processing-metrics-event-schema", schema_artifact=True),
            ],
        ),
    )

    event_bridge = NodeRef("processed-content-bus")
    content_extracted_schema = NodeRef("processed-content-bus/content-extracted-event-schema")
    content_chunked_schema = NodeRef("processed-content-bus/content-chunked-event-schema")
    processing_failed_schema = NodeRef("processed-content-bus/processing-failed-event-schema")
    processing_metrics_schema = NodeRef("processed-content-bus/processing-metrics-event-schema")


def _stream(name: str, *schemas: str) -> NodeSpec:
    return NodeSpec(
        path_part=name,
        children=[NodeSpec(path_part=s, schema_artifact=True) for s in schemas],
    )


class DocumentProcessingStreamsProducer(Producer):
    """Kinesis streams; processing owns their sharding and topology."""

    layout = (
        _stream("main-processing-stream", "document-record-schema", "processing-result-schema"),
        _stream("priority-processing-stream", "priority-document-record-schema", "sla-tracking-schema"),
        _stream("batch-processing-stream", "batch-job-record-schema", "batch-progress-schema"),
        _stream("dlq-stream", "failed-record-schema", "error-context-schema"),
        _stream("metrics-stream", "performance-metrics-schema", "resource-usage-schema"),
    )

    # Sharded by document type and size
    main_processing_stream = NodeRef("main-processing-stream")
    main_document_record_schema = NodeRef("main-processing-stream/document-record-schema")
    main_processing_result_schema = NodeRef("main-processing-stream/processing-result-schema")

    # Sharded by user priority and SLA
    priority_processing_stream = NodeRef("priority-processing-stream")
    priority_document_record_schema = NodeRef("priority-processing-stream/priority-document-record-schema")
    sla_tracking_schema = NodeRef("priority-processing-stream/sla-tracking-schema")

    batch_processing_stream = NodeRef("batch-processing-stream")
    batch_job_record_schema = NodeRef("batch-processing-stream/batch-job-record-schema")
    batch_progress_schema = NodeRef("batch-processing-stream/batch-progress-schema")

    dlq_stream = NodeRef("dlq-stream")
    failed_record_schema = NodeRef("dlq-stream/failed-record-schema")
    error_context_schema = NodeRef("dlq-stream/error-context-schema")

    metrics_stream = NodeRef("metrics-stream")
    performance_metrics_schema = NodeRef("metrics-stream/performance-metrics-schema")
    resource_usage_schema = NodeRef("metrics-stream/resource-usage-schema")


class ProcessedContentStorageProducer(Producer):
    """S3 bucket of processed, chunked content polled by embedding."""

    layout = (
        NodeSpec(path_part="processed-content-bucket"),
        NodeSpec(path_part="processed-content-schema", schema_artifact=True),
    )

    processed_content_bucket = NodeRef("processed-content-bucket")
    processed_content_schema = NodeRef("processed-content-schema")


class DocumentProcessingEnver(RagEnver):
    document_subscription = WiredConsumer()
    document_metadata_schema = WiredConsumer()

    processed_content_storage = WiredProducer()
    status_api = WiredProducer()

    def __init__(self, build: Build, name: str, account: str, region: str, revision: SrcRevRef) -> None:
        super().__init__(build, name, account, region, revision)

        self.processing_streams = DocumentProcessingStreamsProducer(self, "processing-streams")
        self.processed_content_events = ProcessedContentEventProducer(self, "processed-content-events")

        self.processor_identity = self.create_identity("processor")
        self.poller_identity = self.create_identity("s3-poller")

    def wire(self) -> None:
        ingestion = self.rag.document_ingestion.counterpart(self)
        storage = ingestion.document_storage

        self.document_subscription = Consumer(self, "document-subscription", storage.document_bucket)
        self.document_metadata_schema = Consumer(
            self, "document-metadata-schema", storage.doc_metadata_schema
        )

        self.processed_content_storage = ProcessedContentStorageProducer(
            self, "processed-content-storage"
        )
        self.trust(self.processed_content_storage.processed_content_bucket, EMBEDDING_NAMESPACE)
        self.status_api = StatusApiProducer(self, "status-api")


class DocumentProcessingBuild(RagServiceBuild):
    BUILD_ID = "ragDocumentProcessing"
    REPO_KEY = "ragDocumentProcessing"
    namespace = NAMESPACE
    enver_class = DocumentProcessingEnver
