"""
zkdeploy.orchestration - Revision Logic
=========================================

    RevisionStore - upload, trim_recent_uploads, activate, active_revision,
                    fetch_revisions, will_deploy
"""

from zkdeploy.orchestration.revision_store import RevisionStore

__all__ = ["RevisionStore"]
