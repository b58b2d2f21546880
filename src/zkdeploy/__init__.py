"""
zkdeploy - Revision-Indexed Deploy Store
==========================================

zkdeploy stores deployable files in a Zookeeper-like coordination service
as versioned revisions with a bounded history and an atomically
switchable "active" pointer, and exposes it as a deploy pipeline plugin.

Architecture Layers (top to bottom):
    1. Facade         - ZookeeperDeployPlugin (pipeline hooks)
    2. Orchestration  - RevisionStore (upload, trim, activate, list)
    3. Infrastructure - NodeStore contract, PathEnsurer
    4. Core           - Path scheme, config, models, exceptions

Quick Start:
    >>> from zkdeploy import ZookeeperDeployPlugin
    >>> from zkdeploy.infrastructure import InMemoryNodeStore
    >>> async with ZookeeperDeployPlugin(InMemoryNodeStore()) as plugin:
    ...     await plugin.upload(context)
"""

# =============================================================================
# Package Version
# =============================================================================
__version__ = "0.1.0"

# =============================================================================
# Package-Level Exports
# =============================================================================
from zkdeploy.facade import ZookeeperDeployPlugin
from zkdeploy.orchestration.revision_store import RevisionStore

__all__ = ["RevisionStore", "ZookeeperDeployPlugin", "__version__"]
