"""
zkdeploy.core.exceptions - Custom Exception Hierarchy
=======================================================

This module defines the structured exception hierarchy for zkdeploy.
Components raise and catch specific exception types that carry contextual
information instead of bare strings.

Exception Hierarchy:
    ZkDeployError (base)
        ├── ConfigurationError     - Invalid config file or values
        ├── StoreError             - Coordination store / transport failures
        │     ├── NodeExistsError  - Exclusive create on a present path
        │     └── NoNodeError      - Read/write/remove on an absent path
        ├── InvalidRevisionError   - Activation target not in history
        └── InvalidKeyError        - Empty or malformed key / path segment

Propagation Policy:
    Nothing in zkdeploy retries. Every StoreError raised by a NodeStore
    propagates to the caller unchanged, except for the few places that
    document a tolerated case:
        - trim_recent_uploads: duplicate marker (NodeExistsError)
        - trim_recent_uploads: concurrent removal (NoNodeError)
        - active_revision:     missing pointer (NoNodeError → None)

Usage:
    >>> from zkdeploy.core.exceptions import NodeExistsError
    >>> raise NodeExistsError(
    ...     message="Value already exists for key: /key/default/index.html",
    ...     path="/key/default/index.html",
    ... )
"""

from __future__ import annotations

from typing import Any, Optional


# =============================================================================
# Base Exception
# =============================================================================
# All zkdeploy exceptions inherit from this base class, so the host pipeline
# can catch every framework error with one except clause:
#
#   try:
#       await plugin.activate(context)
#   except ZkDeployError as e:
#       logger.error(e.message, error_code=e.error_code, details=e.details)
# =============================================================================
class ZkDeployError(Exception):
    """Base exception for all zkdeploy errors.

    Attributes:
        message: Human-readable error description. ``str(error)`` returns it
            verbatim, which the deploy pipeline prints to the user.
        error_code: Machine-readable error code (UPPER_SNAKE_CASE).
        details: Arbitrary dict with additional debugging context.
    """

    def __init__(
        self,
        message: str,
        error_code: str = "UNKNOWN_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)

        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize this exception to a dictionary.

        Returns:
            Dictionary with error_type, message, error_code, and details.
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


# =============================================================================
# Configuration Error
# =============================================================================
class ConfigurationError(ZkDeployError):
    """Raised when zkdeploy configuration is invalid.

    Common Causes:
        - Malformed YAML in zkdeploy.yaml
        - A YAML document whose top level is not a mapping

    Example:
        >>> raise ConfigurationError(
        ...     message="Invalid YAML in zkdeploy.yaml",
        ...     details={"path": "zkdeploy.yaml"},
        ... )
    """

    def __init__(
        self,
        message: str,
        error_code: str = "CONFIG_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)


# =============================================================================
# Store Errors
# =============================================================================
# StoreError is the opaque failure of the coordination client (session
# expired, connection loss, timeout...). The two subclasses are the
# node-level outcomes the revision logic reasons about.
# =============================================================================
class StoreError(ZkDeployError):
    """Raised when a coordination store operation fails.

    Concrete NodeStore implementations wrap their client's failures in this
    type. zkdeploy never retries on it.

    Attributes:
        path: The node path the failing operation targeted, if known.
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        error_code: str = "STORE_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        if path is not None:
            enriched_details["path"] = path

        super().__init__(message=message, error_code=error_code, details=enriched_details)

        self.path = path


class NodeExistsError(StoreError):
    """Raised by an exclusive create when the node is already present."""

    def __init__(
        self,
        message: str = "The node already exists",
        path: Optional[str] = None,
        error_code: str = "NODE_EXISTS",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, path=path, error_code=error_code, details=details)


class NoNodeError(StoreError):
    """Raised when reading, writing or removing a node that does not exist."""

    def __init__(
        self,
        message: str = "The node does not exist",
        path: Optional[str] = None,
        error_code: str = "NO_NODE",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, path=path, error_code=error_code, details=details)


# =============================================================================
# Invalid Revision Error
# =============================================================================
class InvalidRevisionError(ZkDeployError):
    """Raised when activating a revision that has no marker in the history.

    Attributes:
        revision_key: The revision key the caller asked to activate.

    Example:
        >>> raise InvalidRevisionError(revision_key="notme")
        InvalidRevisionError: `notme` is not a valid revision key
    """

    def __init__(
        self,
        revision_key: str,
        message: Optional[str] = None,
        error_code: str = "INVALID_REVISION",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details["revision_key"] = revision_key

        super().__init__(
            message=message or f"`{revision_key}` is not a valid revision key",
            error_code=error_code,
            details=enriched_details,
        )

        self.revision_key = revision_key


# =============================================================================
# Invalid Key Error
# =============================================================================
class InvalidKeyError(ZkDeployError):
    """Raised when a key or path segment is empty or malformed."""

    def __init__(
        self,
        message: str,
        error_code: str = "INVALID_KEY",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)
