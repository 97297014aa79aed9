"""
Domain models — the contract graph and its configuration.

All models are re-exported here for convenient access:

    from rag_contracts.core.models import Build, Enver, Producer, Consumer, NodeSpec
"""

from rag_contracts.core.models.build import Build
from rag_contracts.core.models.config import ContractsConfig, GithubRepo
from rag_contracts.core.models.consumer import Consumer
from rag_contracts.core.models.enver import (
    Enver,
    LifecycleState,
    SrcRevRef,
    TrustGrant,
    WiredConsumer,
    WiredProducer,
)
from rag_contracts.core.models.producer import NodeRef, Producer
from rag_contracts.core.models.resource import NodeSpec, ResourceNode

__all__ = [
    # build.py
    "Build",
    # consumer.py
    "Consumer",
    # config.py
    "ContractsConfig",
    # enver.py
    "Enver",
    "GithubRepo",
    "LifecycleState",
    # producer.py
    "NodeRef",
    # resource.py
    "NodeSpec",
    "Producer",
    "ResourceNode",
    "SrcRevRef",
    "TrustGrant",
    "WiredConsumer",
    "WiredProducer",
]
