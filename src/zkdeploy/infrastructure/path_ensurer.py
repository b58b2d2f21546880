"""
zkdeploy.infrastructure.path_ensurer - Idempotent Path Creation
=================================================================

Coordination stores create one node at a time and refuse to create a node
that already exists. PathEnsurer walks a path from the root down and
creates each missing segment, so "make sure /a/b/c exists" never fails
because /a or /a/b is already there.

    ensure("/nested/key/revisions")
        create_or_noop("/nested")
        create_or_noop("/nested/key")
        create_or_noop("/nested/key/revisions")
"""

from __future__ import annotations

import structlog

from zkdeploy.core.paths import split_path
from zkdeploy.infrastructure.node_store import NodeStore

logger = structlog.get_logger()


class PathEnsurer:
    """Creates every missing segment of a path, root first."""

    def __init__(self, node_store: NodeStore) -> None:
        self._node_store = node_store
        self._logger = logger.bind(component="path_ensurer")

    async def ensure(self, path: str) -> list[str]:
        """Make sure every segment of ``path`` exists.

        Args:
            path: Absolute node path.

        Returns:
            The partial paths this call created, root first. Empty when the
            whole path already existed.
        """
        created: list[str] = []
        for partial in split_path(path):
            if await self._node_store.create_or_noop(partial):
                created.append(partial)

        if created:
            self._logger.debug("path_segments_created", path=path, created=created)
        return created
