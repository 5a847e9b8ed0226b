"""
Service layer for the identity injector.

Contains the pod mutator and the default identity value producer.
"""

from .identity import IdentityEnvProducer, namespace_to_domain
from .pod_mutator import PodMutator, build_mutator

__all__ = [
    "PodMutator",
    "build_mutator",
    "IdentityEnvProducer",
    "namespace_to_domain",
]
