"""
User auth — the shared identity provider for every RAG web surface.

One enver, on its own branch.  It produces the identity-provider client
id and name plus the home server domain, and consumes every ingestion
enver's callback and logout URLs.  Ingestion in turn consumes the
client id and name; both sides only read constructor-time producers, so
neither has to wait for the other's wiring.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from rag_contracts.core.models import (
    Build,
    Consumer,
    Enver,
    Producer,
    SrcRevRef,
    WiredConsumer,
)
from rag_contracts.core.resolution import Propagation
from rag_contracts.services.base import RagEnver

if TYPE_CHECKING:
    from rag_contracts.core.registry import ContractsRegistry

NAMESPACE = "user-auth"


class UserAuthEnver(RagEnver):
    rev_stack_suffixes = ("-web-hosting", "-web-ui")

    callback_urls = WiredConsumer()
    logout_urls = WiredConsumer()

    def __init__(self, build: Build, name: str, account: str, region: str, revision: SrcRevRef) -> None:
        super().__init__(build, name, account, region, revision)

        self.id_provider_client_id = Producer(self, "id-provider-client-id")
        self.id_provider_name = Producer(self, "id-provider-name")
        self.home_server_domain_name = Producer(self, "home-server-domain-name")

        self.auth_handler_identity = self.create_identity("auth-handler")

    def wire(self) -> None:
        callbacks: list[Consumer] = []
        logouts: list[Consumer] = []
        for index, enver in enumerate(self.rag.document_ingestion.envers):
            callbacks.append(Consumer(self, f"doc-ing-callback-{index}", enver.auth_callback_url))
            logouts.append(Consumer(self, f"doc-ing-logout-{index}", enver.logout_url))
        self.callback_urls = callbacks
        self.logout_urls = logouts


class UserAuthBuild(Build):
    BUILD_ID = "userAuth"
    REPO_KEY = "__userAuth"
    namespace = NAMESPACE

    def __init__(self, contracts: ContractsRegistry) -> None:
        super().__init__(contracts, self.BUILD_ID, contracts.config.repo(self.REPO_KEY))

    def initialize_envers(self) -> Sequence[Enver]:
        config = self.contracts.config
        return [
            UserAuthEnver(
                self,
                "shared",
                config.account("workspace1"),
                config.default_region,
                SrcRevRef(type="b", value="odmd-rag"),
            )
        ]

    @property
    def shared(self) -> UserAuthEnver:
        return self.envers[0]  # type: ignore[return-value]


def consume_identity_provider(
    enver: RagEnver,
    fallback: bool = True,
    home_server: bool = False,
) -> list[Consumer]:
    """Consume the identity provider's client id and name (and home domain).

    With ``fallback`` the consumers use placeholder values until user
    auth first deploys, and do not redeploy ``enver`` when they change.
    Consumer ids match the producer ids.
    """
    user_auth = enver.rag.user_auth.shared
    targets = [
        (user_auth.id_provider_client_id, "default-client-id"),
        (user_auth.id_provider_name, "default-provider-name"),
    ]
    if home_server:
        targets.append((user_auth.home_server_domain_name, "https://localhost:3000"))

    consumers = []
    for producer, default in targets:
        if fallback:
            consumers.append(
                Consumer(
                    enver,
                    producer.producer_id,
                    producer,
                    fallback_value=default,
                    propagation=Propagation.NONE,
                )
            )
        else:
            consumers.append(Consumer(enver, producer.producer_id, producer))
    return consumers
