"""
zkdeploy.infrastructure - Coordination Store Layer
====================================================

    NodeStore (ABC)         - Node primitives over a coordination client
      └── InMemoryNodeStore - Flat dict-backed store for development/testing
    PathEnsurer             - Idempotent, root-first path creation

Usage:
    from zkdeploy.infrastructure import InMemoryNodeStore, PathEnsurer
"""

from zkdeploy.infrastructure.node_store import InMemoryNodeStore, NodeStore, Payload
from zkdeploy.infrastructure.path_ensurer import PathEnsurer

__all__ = [
    "InMemoryNodeStore",
    "NodeStore",
    "Payload",
    "PathEnsurer",
]
