"""
zkdeploy.orchestration.revision_store - Revision-Indexed Artifact Store
=========================================================================

This module implements the RevisionStore: it turns a generic hierarchical
NodeStore into a versioned deployment artifact store with bounded history
and an atomically switchable "active" pointer.

Architecture:
    ┌──────────────────┐  upload / trim / activate  ┌──────────────────┐
    │ Deploy plugin     │ ─────────────────────────→ │  RevisionStore    │
    │ (facade hooks)    │ ←───────────────────────── │                   │
    └──────────────────┘   paths, RevisionRecords   └────────┬─────────┘
                                                              │
                                   PathScheme ← paths ────────┤
                                   PathEnsurer ← ensure ──────┤
                                   NodeStore ← node ops ──────┘

Namespace (see zkdeploy.core.paths):
    <keyPrefix>/<key>                          → active revision key
    <keyPrefix>/<key>/revisions/<revisionKey>  → upload sequence marker
    <keyPrefix>/<key>/<revisionKey>/<filename> → artifact content

Retention:
    trim_recent_uploads keeps at most ``retention_size`` non-active
    revisions. Revisions are aged by the creation stamp of their marker
    node, never by the lexical value of the revision key. The active
    revision is neither counted nor removed.

Failure Semantics:
    Every operation issues its store calls one after another and performs
    no retries. Pruning is not transactional: an error aborts the remaining
    steps and leaves already-removed revisions removed. A later trim resumes
    from whatever is left, and a NoNodeError from a concurrent trim that got
    there first counts as success.
"""

from __future__ import annotations

import time
from typing import Optional

import structlog

from zkdeploy.core import paths
from zkdeploy.core.config import RevisionStoreConfig
from zkdeploy.core.exceptions import InvalidRevisionError, NodeExistsError, NoNodeError
from zkdeploy.core.models import RevisionRecord
from zkdeploy.infrastructure.node_store import NodeStore, Payload
from zkdeploy.infrastructure.path_ensurer import PathEnsurer

logger = structlog.get_logger()


def _upload_sequence() -> int:
    """Upload sequence value stored in revision markers (epoch millis)."""
    return int(time.time() * 1000)


class RevisionStore:
    """Versioned artifact storage on top of a NodeStore.

    Attributes:
        _node_store: The coordination store adapter.
        _ensurer: Idempotent path creator over the same store.
        _config: Key prefix, overwrite flag and retention size.

    Example:
        >>> store = RevisionStore(InMemoryNodeStore())
        >>> await store.upload("app", "index.html", "<html/>", revision_key="abc")
        '/app/abc/index.html'
        >>> await store.trim_recent_uploads("app", "abc")
        []
        >>> await store.activate("app", "abc")
        'abc'
    """

    def __init__(
        self,
        node_store: NodeStore,
        config: Optional[RevisionStoreConfig] = None,
    ) -> None:
        self._node_store = node_store
        self._ensurer = PathEnsurer(node_store)
        self._config = config or RevisionStoreConfig()
        self._logger = logger.bind(component="revision_store")

    @property
    def config(self) -> RevisionStoreConfig:
        return self._config

    def resolve_revision_key(self, revision_key: Optional[str] = None) -> str:
        """Return ``revision_key``, or the configured default when it is None."""
        if revision_key is None:
            return self._config.default_revision_key
        return revision_key

    # -------------------------------------------------------------------------
    # Deploy Readiness
    # -------------------------------------------------------------------------
    async def will_deploy(self, key: str) -> list[str]:
        """Ensure ``<prefix>/<key>`` and its revisions container exist.

        Returns:
            The path segments that had to be created.
        """
        root = paths.revisions_root(self._config.key_prefix, key)
        return await self._ensurer.ensure(root)

    # -------------------------------------------------------------------------
    # Upload
    # -------------------------------------------------------------------------
    async def upload(
        self,
        key: str,
        filename: str,
        content: Payload,
        revision_key: Optional[str] = None,
    ) -> str:
        """Store one file of a revision.

        Args:
            key: The deployable unit.
            filename: Name of the uploaded file, relative to the revision
                root. May contain ``/`` to nest below the revision.
            content: File content, as text or raw bytes.
            revision_key: Revision the file belongs to; defaults to the
                configured default revision key.

        Returns:
            The artifact node path.

        Raises:
            NodeExistsError: If the artifact path is occupied and
                ``allow_overwrite`` is off. Not retried.
        """
        revision_key = self.resolve_revision_key(revision_key)
        prefix = self._config.key_prefix

        await self._ensurer.ensure(paths.revisions_root(prefix, key))
        target = paths.artifact_path(prefix, key, revision_key, filename)
        await self._ensurer.ensure(paths.parent_path(target))

        if self._config.allow_overwrite:
            await self._create_or_overwrite(target, content)
        else:
            try:
                await self._node_store.create_exclusive(target, content)
            except NodeExistsError as exc:
                raise NodeExistsError(
                    message=f"Value already exists for key: {target}",
                    path=target,
                ) from exc

        self._logger.info(
            "artifact_uploaded",
            key=key,
            revision_key=revision_key,
            path=target,
            size=len(content),
        )
        return target

    async def _create_or_overwrite(self, path: str, content: Payload) -> None:
        if await self._node_store.exists(path):
            await self._node_store.write(path, content)
            return
        try:
            await self._node_store.create_exclusive(path, content)
        except NodeExistsError:
            # Another writer created it between the check and the create.
            await self._node_store.write(path, content)

    # -------------------------------------------------------------------------
    # Retention
    # -------------------------------------------------------------------------
    async def trim_recent_uploads(
        self,
        key: str,
        revision_key: Optional[str] = None,
    ) -> list[str]:
        """Record ``revision_key`` in the history, then prune old revisions.

        Recording is idempotent: a marker that already exists is left as
        is. Pruning removes the oldest non-active revisions until at most
        ``retention_size`` non-active revisions remain. Each removal
        deletes the revision's artifact nodes before its marker.

        Returns:
            The revision keys removed by this call, oldest first.

        Raises:
            StoreError: On any store failure other than the tolerated
                duplicate marker and concurrent removal. Revisions removed
                before the failure stay removed.
        """
        revision_key = self.resolve_revision_key(revision_key)
        prefix = self._config.key_prefix

        await self._ensurer.ensure(paths.revisions_root(prefix, key))
        marker = paths.revision_marker_path(prefix, key, revision_key)
        try:
            await self._node_store.create_exclusive(marker, str(_upload_sequence()))
        except NodeExistsError:
            self._logger.debug("revision_marker_exists", key=key, revision_key=revision_key)

        by_age = await self._revisions_by_age(key)
        active = await self.active_revision(key)
        candidates = [revision for revision in by_age if revision != active]
        excess = len(candidates) - self._config.retention_size

        removed: list[str] = []
        for revision in candidates[:max(excess, 0)]:
            await self._remove_revision(key, revision)
            removed.append(revision)

        if removed:
            self._logger.info(
                "revisions_trimmed",
                key=key,
                removed=removed,
                active=active,
                retained=len(by_age) - len(removed),
            )
        return removed

    async def _revisions_by_age(self, key: str) -> list[str]:
        root = paths.revisions_root(self._config.key_prefix, key)
        stamped: list[tuple[int, int, str]] = []
        for position, revision in enumerate(await self._node_store.children(root)):
            marker = paths.revision_marker_path(self._config.key_prefix, key, revision)
            try:
                ctime = await self._node_store.creation_timestamp(marker)
            except NoNodeError:
                # Removed by a concurrent trim since the listing.
                continue
            stamped.append((ctime, position, revision))
        return [revision for _, _, revision in sorted(stamped)]

    async def _remove_revision(self, key: str, revision_key: str) -> None:
        prefix = self._config.key_prefix
        revision_root = paths.revision_root(prefix, key, revision_key)

        removed = await self._remove_tree(revision_root)
        await self._remove_quietly(paths.revision_marker_path(prefix, key, revision_key))

        self._logger.debug(
            "revision_removed",
            key=key,
            revision_key=revision_key,
            nodes=removed,
        )

    async def _remove_tree(self, path: str) -> int:
        """Remove ``path`` and everything below it, leaves before parents.

        Returns:
            The number of descendant nodes visited below ``path``.
        """
        try:
            names = await self._node_store.children(path)
        except NoNodeError:
            names = []
        visited = 0
        for name in names:
            visited += 1 + await self._remove_tree(paths.child_path(path, name))
        await self._remove_quietly(path)
        return visited

    async def _remove_quietly(self, path: str) -> None:
        try:
            await self._node_store.remove(path)
        except NoNodeError:
            pass

    # -------------------------------------------------------------------------
    # Activation
    # -------------------------------------------------------------------------
    async def active_revision(self, key: str) -> Optional[str]:
        """Return the active revision of ``key``, or None if never activated."""
        pointer = paths.active_pointer_path(self._config.key_prefix, key)
        try:
            value = await self._node_store.read(pointer)
        except NoNodeError:
            return None
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        # A bare container created by will_deploy has an empty payload.
        return value or None

    async def activate(self, key: str, revision_key: str) -> str:
        """Point ``key`` at ``revision_key``.

        Raises:
            InvalidRevisionError: If ``revision_key`` has no marker in the
                revision history.
        """
        prefix = self._config.key_prefix
        try:
            revisions = await self._node_store.children(paths.revisions_root(prefix, key))
        except NoNodeError:
            revisions = []
        if revision_key not in revisions:
            raise InvalidRevisionError(revision_key=revision_key, details={"key": key})

        pointer = paths.active_pointer_path(prefix, key)
        await self._ensurer.ensure(pointer)
        await self._node_store.write(pointer, revision_key)

        self._logger.info("revision_activated", key=key, revision_key=revision_key)
        return revision_key

    # -------------------------------------------------------------------------
    # Listing
    # -------------------------------------------------------------------------
    async def fetch_revisions(self, key: str) -> list[RevisionRecord]:
        """List the revision history of ``key`` in store enumeration order.

        Returns:
            One RevisionRecord per marker. Empty if nothing was uploaded.
        """
        prefix = self._config.key_prefix
        try:
            revisions = await self._node_store.children(paths.revisions_root(prefix, key))
        except NoNodeError:
            return []

        active = await self.active_revision(key)
        records: list[RevisionRecord] = []
        for revision in revisions:
            marker = paths.revision_marker_path(prefix, key, revision)
            try:
                timestamp = await self._marker_timestamp(marker)
            except NoNodeError:
                continue
            records.append(
                RevisionRecord(
                    revision=revision,
                    timestamp=timestamp,
                    active=revision == active,
                )
            )
        return records

    async def _marker_timestamp(self, marker: str) -> int:
        payload = await self._node_store.read(marker)
        try:
            return int(payload)
        except ValueError:
            self._logger.warning("revision_marker_not_numeric", path=marker, payload=payload)
            return await self._node_store.creation_timestamp(marker)
