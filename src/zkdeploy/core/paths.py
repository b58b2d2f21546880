"""
zkdeploy.core.paths - Node Path Scheme
========================================

Pure functions mapping (key_prefix, key, revision_key, filename) to node
paths in the coordination store. No I/O, no state.

Namespace Layout:
    <keyPrefix>/<key>                          → active revision key
    <keyPrefix>/<key>/revisions                → container node
    <keyPrefix>/<key>/revisions/<revisionKey>  → upload sequence marker
    <keyPrefix>/<key>/<revisionKey>/<filename> → uploaded artifact content

Joining Rules:
    Every part is stripped of leading/trailing slashes and empty parts are
    skipped, so an empty key prefix and a key such as "/nested/key" both
    produce clean absolute paths:

        >>> artifact_path("", "/nested/key", "abc", "index.html")
        '/nested/key/abc/index.html'
"""

from __future__ import annotations

from zkdeploy.core.exceptions import InvalidKeyError

REVISIONS_NODE = "revisions"
SEPARATOR = "/"


def _join(*parts: str) -> str:
    segments = [part.strip(SEPARATOR) for part in parts]
    return SEPARATOR + SEPARATOR.join(s for s in segments if s)


def _require_key(key: str) -> str:
    if not key or not key.strip(SEPARATOR):
        raise InvalidKeyError(
            message="Key must not be empty",
            details={"key": key},
        )
    return key


def _require_segment(value: str, name: str) -> str:
    if not value or not value.strip(SEPARATOR):
        raise InvalidKeyError(
            message=f"{name} must not be empty",
            details={name: value},
        )
    return value


def _require_revision_key(revision_key: str) -> str:
    _require_segment(revision_key, "revision_key")
    if SEPARATOR in revision_key or revision_key == REVISIONS_NODE:
        raise InvalidKeyError(
            message=f"Invalid revision key: {revision_key!r}",
            details={"revision_key": revision_key},
        )
    return revision_key


def active_pointer_path(key_prefix: str, key: str) -> str:
    """Path whose payload names the active revision of ``key``."""
    return _join(key_prefix, _require_key(key))


def revisions_root(key_prefix: str, key: str) -> str:
    """Container node holding one marker per uploaded revision."""
    return _join(active_pointer_path(key_prefix, key), REVISIONS_NODE)


def revision_marker_path(key_prefix: str, key: str, revision_key: str) -> str:
    return _join(
        revisions_root(key_prefix, key),
        _require_revision_key(revision_key),
    )


def revision_root(key_prefix: str, key: str, revision_key: str) -> str:
    """Parent node of every artifact uploaded for ``revision_key``."""
    return _join(
        active_pointer_path(key_prefix, key),
        _require_revision_key(revision_key),
    )


def artifact_path(key_prefix: str, key: str, revision_key: str, filename: str) -> str:
    """Node holding ``filename``. Nested filenames such as ``assets/app.js``
    map onto nested nodes below the revision root; empty segments collapse.
    """
    _require_segment(filename, "filename")
    segments = [s for s in filename.split(SEPARATOR) if s]
    return _join(revision_root(key_prefix, key, revision_key), *segments)


def child_path(parent: str, name: str) -> str:
    return _join(parent, name)


def parent_path(path: str) -> str:
    """Path of the parent node, or the root for a top-level node."""
    segments = [s for s in path.split(SEPARATOR) if s]
    return SEPARATOR + SEPARATOR.join(segments[:-1])


def split_path(path: str) -> list[str]:
    """Expand a path into its partial paths, root first.

    Example:
        >>> split_path("/a/b/c")
        ['/a', '/a/b', '/a/b/c']
    """
    segments = [s for s in path.split(SEPARATOR) if s]
    return [
        SEPARATOR + SEPARATOR.join(segments[: i + 1])
        for i in range(len(segments))
    ]
