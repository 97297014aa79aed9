"""
Generation — answers questions over retrieved context and hosts the web UI.

Every upstream reference carries a fallback, so generation deploys
independently of knowledge retrieval and user auth.
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
)
from rag_contracts.core.resolution import Propagation
from rag_contracts.services.base import RagEnver, RagServiceBuild
from rag_contracts.services.user_auth import consume_identity_provider

NAMESPACE = "generation"


class GenerationApiProducer(Producer):
    layout = (
        NodeSpec(
            path_part="generation-api",
            children=[
                NodeSpec(path_part="generation-request-schema", schema_artifact=True),
                NodeSpec(path_part="generation-response-schema", schema_artifact=True),
                NodeSpec(path_part="conversation-schema", schema_artifact=True),
                NodeSpec(path_part="feedback-schema", schema_artifact=True),
            ],
        ),
        NodeSpec(path_part="web-ui-cloudfront-url"),
        NodeSpec(path_part="web-ui-s3-bucket"),
    )

    generation_api = NodeRef("generation-api")
    generation_request_schema = NodeRef("generation-api/generation-request-schema")
    generation_response_schema = NodeRef("generation-api/generation-response-schema")
    conversation_schema = NodeRef("generation-api/conversation-schema")
    feedback_schema = NodeRef("generation-api/feedback-schema")
    web_ui_cloudfront_url = NodeRef("web-ui-cloudfront-url")
    web_ui_s3_bucket = NodeRef("web-ui-s3-bucket")


class GenerationEnver(RagEnver):
    vector_search_proxy_subscription = WiredConsumer()
    health_check_subscription = WiredConsumer()
    search_schema_subscription = WiredConsumer()
    auth_provider_client_id = WiredConsumer()
    auth_provider_name = WiredConsumer()

    def __init__(self, build: Build, name: str, account: str, region: str, revision: SrcRevRef) -> None:
        super().__init__(build, name, account, region, revision)

        self.generation_api = GenerationApiProducer(self, "generation-api")
        self.generation_identity = self.create_identity("generation-handler")

    def _optional(self, consumer_id: str, target, default: str) -> Consumer:
        return Consumer(
            self,
            consumer_id,
            target,
            fallback_value=default,
            propagation=Propagation.NONE,
        )

    def wire(self) -> None:
        proxy = self.rag.knowledge_retrieval.counterpart(self).vector_search_proxy_api

        self.vector_search_proxy_subscription = self._optional(
            "vector-search-proxy-subscription",
            proxy.vector_search_endpoint,
            "default-vector-search-api",
        )
        self.health_check_subscription = self._optional(
            "health-check-subscription",
            proxy.health_check_endpoint,
            "default-health-check-api",
        )
        self.search_schema_subscription = self._optional(
            "search-schema-subscription",
            proxy.search_request_schema,
            "default-search-schema",
        )
        self.auth_provider_client_id, self.auth_provider_name = consume_identity_provider(self)


class GenerationBuild(RagServiceBuild):
    BUILD_ID = "ragGeneration"
    REPO_KEY = "ragGeneration"
    namespace = NAMESPACE
    enver_class = GenerationEnver
