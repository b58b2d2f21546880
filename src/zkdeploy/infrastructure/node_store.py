"""
zkdeploy.infrastructure.node_store - Coordination Store Contract
==================================================================

This module defines the NodeStore abstraction: the minimal set of node
primitives zkdeploy needs from a Zookeeper-like coordination service.
Session establishment, reconnection, authentication and retries belong to
the concrete client behind it; the revision logic only sees these calls.

Architecture Context:
    ┌──────────────────┐     exists / create / read / write     ┌──────────────┐
    │  RevisionStore    │ ────────────────────────────────────→ │  NodeStore    │
    │  PathEnsurer      │     children / remove / ctime          │  (ABC)        │
    └──────────────────┘                                        └──────┬───────┘
                                                                        │
                                              ┌─────────────────────────┴──┐
                                              │ InMemoryNodeStore           │
                                              │ (client adapters subclass)  │
                                              └─────────────────────────────┘

Primitives:
    exists(path)                 → bool
    create_exclusive(path, data) → NodeExistsError if present (atomic)
    create_or_noop(path, data)   → True if created, False if it existed
    write(path, data)            → NoNodeError if absent
    read(path)                   → NoNodeError if absent
    children(path)               → NoNodeError if absent, [] if leaf
    remove(path)                 → NoNodeError if absent, never recursive
    creation_timestamp(path)     → non-decreasing in creation order

Implementations:
    - NodeStore (ABC):       Abstract interface
    - InMemoryNodeStore:     Flat path-keyed dict, for development/testing
"""

from __future__ import annotations

import itertools
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional, Union

import structlog

from zkdeploy.core.exceptions import NodeExistsError, NoNodeError
from zkdeploy.core.paths import SEPARATOR


# =============================================================================
# Logger
# =============================================================================
logger = structlog.get_logger()

# Node payloads are opaque to the store: text or raw bytes.
Payload = Union[str, bytes]


# =============================================================================
# Abstract Base Class: NodeStore
# =============================================================================
class NodeStore(ABC):
    """Abstract interface over a hierarchical coordination store.

    Every method may suspend on network I/O. Implementations raise
    NodeExistsError / NoNodeError for the node-level outcomes below and
    StoreError for any other client failure. They do not add retries of
    their own.

    Example:
        >>> async def publish(store: NodeStore) -> None:
        ...     await store.create_exclusive("/app/v1/index.html", "<html/>")
        ...     assert await store.exists("/app/v1/index.html")
    """

    # -------------------------------------------------------------------------
    # Connection Lifecycle
    # -------------------------------------------------------------------------
    @abstractmethod
    async def connect(self) -> None:
        """Open the session with the coordination service."""
        ...

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the session with the coordination service."""
        ...

    # -------------------------------------------------------------------------
    # Node Primitives
    # -------------------------------------------------------------------------
    @abstractmethod
    async def exists(self, path: str) -> bool:
        """Check whether a node exists at ``path``."""
        ...

    @abstractmethod
    async def create_exclusive(self, path: str, payload: Payload = "") -> None:
        """Create a node, failing if it is already present.

        This is the only primitive allowed to decide between concurrent
        creators; its atomicity is the coordination service's.

        Raises:
            NodeExistsError: If a node already exists at ``path``.
        """
        ...

    @abstractmethod
    async def write(self, path: str, payload: Payload) -> None:
        """Overwrite the payload of an existing node.

        Raises:
            NoNodeError: If no node exists at ``path``.
        """
        ...

    @abstractmethod
    async def read(self, path: str) -> Payload:
        """Read the payload of a node.

        Raises:
            NoNodeError: If no node exists at ``path``.
        """
        ...

    @abstractmethod
    async def children(self, path: str) -> list[str]:
        """List the names of the direct children of a node.

        Callers must not assume chronological order unless the concrete
        store guarantees it.

        Raises:
            NoNodeError: If no node exists at ``path``.
        """
        ...

    @abstractmethod
    async def remove(self, path: str) -> None:
        """Remove a single node. Removing a node with children is
        implementation-defined; callers delete children first.

        Raises:
            NoNodeError: If no node exists at ``path``.
        """
        ...

    @abstractmethod
    async def creation_timestamp(self, path: str) -> int:
        """Return the creation stamp of a node (ctime / czxid).

        Raises:
            NoNodeError: If no node exists at ``path``.
        """
        ...

    # -------------------------------------------------------------------------
    # Derived Operations
    # -------------------------------------------------------------------------
    async def create_or_noop(self, path: str, payload: Payload = "") -> bool:
        """Create a node unless it already exists.

        Returns:
            True if this call created the node, False if it was present.
        """
        try:
            await self.create_exclusive(path, payload)
        except NodeExistsError:
            return False
        return True


# =============================================================================
# In-Memory Implementation
# =============================================================================
@dataclass
class _Node:
    payload: Payload
    ctime: int


class InMemoryNodeStore(NodeStore):
    """Flat, path-keyed node store for development and testing.

    Nodes live in a single dict from absolute path to payload plus a
    creation stamp drawn from a monotonic counter. Parents are not required
    to exist: children are derived by prefix matching, so a seeded
    ``/key/1/index.html`` makes ``1`` a child of ``/key`` even though
    ``/key/1`` itself was never created.

    Not suitable for production:
        - Data is lost when the process exits
        - Not shared between processes

    Attributes:
        _nodes: Mapping of path to _Node, in creation order.

    Example:
        >>> store = InMemoryNodeStore({"/key": "1", "/key/revisions/1": "1"})
        >>> await store.children("/key/revisions")
        ['1']
    """

    def __init__(self, seed: Optional[Mapping[str, Any]] = None) -> None:
        """Initialize the store, optionally seeded with ``path → payload``.

        Seeded nodes get creation stamps in the mapping's iteration order.
        Bytes payloads are kept as is; any other non-string payload is
        stored as its ``str()`` form.
        """
        self._nodes: dict[str, _Node] = {}
        self._counter = itertools.count(1)
        self._connected = False
        self._logger = logger.bind(component="in_memory_node_store")

        for path, payload in (seed or {}).items():
            if not isinstance(payload, bytes):
                payload = str(payload)
            self._nodes[path] = _Node(payload=payload, ctime=next(self._counter))

    @property
    def is_connected(self) -> bool:
        return self._connected

    def snapshot(self) -> dict[str, Payload]:
        """Return a copy of the ``path → payload`` mapping, in creation order."""
        return {path: node.payload for path, node in self._nodes.items()}

    async def connect(self) -> None:
        self._connected = True
        self._logger.info("node_store_connected", nodes=len(self._nodes))

    async def disconnect(self) -> None:
        self._connected = False
        self._logger.info("node_store_disconnected")

    async def exists(self, path: str) -> bool:
        return path in self._nodes

    async def create_exclusive(self, path: str, payload: Payload = "") -> None:
        if path in self._nodes:
            raise NodeExistsError(path=path)
        self._nodes[path] = _Node(payload=payload, ctime=next(self._counter))
        self._logger.debug("node_created", path=path)

    async def write(self, path: str, payload: Payload) -> None:
        node = self._get(path)
        node.payload = payload
        self._logger.debug("node_written", path=path)

    async def read(self, path: str) -> Payload:
        return self._get(path).payload

    async def children(self, path: str) -> list[str]:
        prefix = path.rstrip(SEPARATOR) + SEPARATOR
        descendants = sorted(
            (node.ctime, p) for p, node in self._nodes.items() if p.startswith(prefix)
        )
        if path not in self._nodes and not descendants:
            raise NoNodeError(path=path)

        names: list[str] = []
        for _, p in descendants:
            name = p[len(prefix):].split(SEPARATOR, 1)[0]
            if name and name not in names:
                names.append(name)
        return names

    async def remove(self, path: str) -> None:
        self._get(path)
        del self._nodes[path]
        self._logger.debug("node_removed", path=path)

    async def creation_timestamp(self, path: str) -> int:
        return self._get(path).ctime

    def _get(self, path: str) -> _Node:
        try:
            return self._nodes[path]
        except KeyError:
            raise NoNodeError(path=path) from None
