"""
Knowledge retrieval — vector search proxy in front of the home server.
"""

from __future__ import annotations

from rag_contracts.core.models import (
    Build,
    NodeRef,
    NodeSpec,
    Producer,
    SrcRevRef,
    WiredConsumer,
)
from rag_contracts.services.base import RagEnver, RagServiceBuild
from rag_contracts.services.user_auth import consume_identity_provider

NAMESPACE = "knowledge-retrieval"


class VectorSearchProxyApiProducer(Producer):
    """API Gateway proxying vector search to the home server."""

    layout = (
        NodeSpec(
            path_part="vector-search-proxy-api",
            children=[
                NodeSpec(path_part="vector-search-endpoint"),
                NodeSpec(path_part="health-check-endpoint"),
                NodeSpec(path_part="search-request-schema", schema_artifact=True),
                NodeSpec(path_part="search-response-schema", schema_artifact=True),
                NodeSpec(path_part="home-server-config"),
            ],
        ),
    )

    proxy_api = NodeRef("vector-search-proxy-api")
    vector_search_endpoint = NodeRef("vector-search-proxy-api/vector-search-endpoint")
    health_check_endpoint = NodeRef("vector-search-proxy-api/health-check-endpoint")
    search_request_schema = NodeRef("vector-search-proxy-api/search-request-schema")
    search_response_schema = NodeRef("vector-search-proxy-api/search-response-schema")
    home_server_config = NodeRef("vector-search-proxy-api/home-server-config")


class KnowledgeRetrievalEnver(RagEnver):
    auth_provider_client_id = WiredConsumer()
    auth_provider_name = WiredConsumer()
    home_server_domain = WiredConsumer()

    def __init__(self, build: Build, name: str, account: str, region: str, revision: SrcRevRef) -> None:
        super().__init__(build, name, account, region, revision)

        self.vector_search_proxy_api = VectorSearchProxyApiProducer(self, "vector-search-proxy-api")
        self.proxy_identity = self.create_identity("proxy-handler")

    def wire(self) -> None:
        (
            self.auth_provider_client_id,
            self.auth_provider_name,
            self.home_server_domain,
        ) = consume_identity_provider(self, home_server=True)


class KnowledgeRetrievalBuild(RagServiceBuild):
    BUILD_ID = "ragRetr"
    REPO_KEY = "ragKnowledgeRetrieval"
    namespace = NAMESPACE
    enver_class = KnowledgeRetrievalEnver
