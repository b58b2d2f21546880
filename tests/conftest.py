"""
Shared Test Fixtures for zkdeploy
===================================

Reusable pytest fixtures, organized by layer:

    1. Configuration fixtures
    2. Infrastructure fixtures (NodeStore, PathEnsurer)
    3. Orchestration fixtures (RevisionStore)
    4. Facade fixtures (ZookeeperDeployPlugin, DeployContext)

Every fixture is backed by InMemoryNodeStore — no coordination service
required.
"""

from __future__ import annotations

import pytest

from zkdeploy.core.config import RevisionStoreConfig, ZookeeperDeployConfig
from zkdeploy.core.models import DeployContext
from zkdeploy.facade import ZookeeperDeployPlugin
from zkdeploy.infrastructure.node_store import InMemoryNodeStore
from zkdeploy.infrastructure.path_ensurer import PathEnsurer
from zkdeploy.orchestration.revision_store import RevisionStore


# =============================================================================
# Configuration
# =============================================================================

@pytest.fixture
def store_config():
    """RevisionStoreConfig with defaults (no prefix, no overwrite, N=10)."""
    return RevisionStoreConfig()


# =============================================================================
# Infrastructure
# =============================================================================

@pytest.fixture
def node_store():
    """Fresh, empty InMemoryNodeStore."""
    return InMemoryNodeStore()


@pytest.fixture
def path_ensurer(node_store):
    """PathEnsurer over the shared node store."""
    return PathEnsurer(node_store)


# =============================================================================
# Orchestration
# =============================================================================

@pytest.fixture
def revision_store(node_store, store_config):
    """RevisionStore over the shared node store."""
    return RevisionStore(node_store, store_config)


# =============================================================================
# Facade
# =============================================================================

@pytest.fixture
def dist_dir(tmp_path):
    """A dist directory holding the files a deploy uploads."""
    (tmp_path / "index.html").write_text("<html><body>v1</body></html>", encoding="utf-8")
    (tmp_path / "robots.txt").write_text("Robot bleep bloop.\n", encoding="utf-8")
    (tmp_path / "random.css").write_text("body { color: red; }\n", encoding="utf-8")
    return tmp_path


@pytest.fixture
def deploy_context():
    """DeployContext for project 'my-project' deploying to 'qa'."""
    return DeployContext(project_name="my-project", deploy_target="qa")


@pytest.fixture
def plugin(node_store, dist_dir):
    """ZookeeperDeployPlugin uploading from the temp dist directory."""
    config = ZookeeperDeployConfig(
        key_prefix="test-prefix",
        files=["index.html"],
        dist_dir=str(dist_dir),
        revision_key="evenbeforewegottoten",
    )
    return ZookeeperDeployPlugin(node_store, config)
