"""
zkdeploy.core.models - Core Data Models
=========================================

Pydantic models shared across zkdeploy layers:

    - RevisionRecord: one entry of a key's revision history (derived, never
      stored as such)
    - UploadedFile:   the node path an uploaded file landed on
    - DeployContext:  the slice of the pipeline context the plugin hooks read
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


# =============================================================================
# Revision Record
# =============================================================================
class RevisionRecord(BaseModel):
    """One revision in a key's upload history.

    Attributes:
        revision: The revision key.
        timestamp: Upload sequence value recorded in the revision marker.
        active: Whether the active pointer currently names this revision.

    Example:
        >>> RevisionRecord(revision="abc123", timestamp=1700000000000, active=True)
    """

    revision: str = Field(description="Revision key")
    timestamp: int = Field(description="Upload sequence value of the marker")
    active: bool = Field(default=False, description="Currently active revision")


# =============================================================================
# Uploaded File
# =============================================================================
class UploadedFile(BaseModel):
    """Result of uploading one file into the store."""

    zk_key: str = Field(description="Node path holding the uploaded content")


# =============================================================================
# Deploy Context
# =============================================================================
# The host pipeline passes a large mutable context around; the plugin only
# reads these fields from it.
# =============================================================================
class DeployContext(BaseModel):
    """Pipeline context handed to the deploy plugin hooks.

    Attributes:
        project_name: Name of the project being deployed.
        deploy_target: Deploy target name (e.g., "qa", "production").
        command_options: Options given on the deploy command line. The
            ``revision`` option selects the revision to activate.
        revision_data: Data produced by earlier pipeline plugins. The
            ``revision_key`` entry names the revision being deployed.
    """

    project_name: str = Field(description="Project being deployed")
    deploy_target: Optional[str] = Field(
        default=None,
        description="Deploy target name",
    )
    command_options: dict[str, Any] = Field(
        default_factory=dict,
        description="Command line options of the deploy command",
    )
    revision_data: dict[str, Any] = Field(
        default_factory=dict,
        description="Revision data produced by earlier plugins",
    )
