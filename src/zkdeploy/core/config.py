"""
zkdeploy.core.config - Configuration Management
=================================================

This module provides the configuration system for zkdeploy. Configuration
can be loaded from multiple sources with the following priority (highest
first):

    1. Explicit constructor arguments (load_config passes YAML values here)
    2. Environment variables (prefixed with ZKDEPLOY_)
    3. Default values defined in the models below

Architecture Context:
    Configuration flows DOWN through the system. The plugin-level
    ZookeeperDeployConfig is created once; the RevisionStore receives only
    the slice it needs:

        ZookeeperDeployConfig
            ├── connect / connection_timeout → coordination client
            ├── files / dist_dir / revision_key → ZookeeperDeployPlugin
            └── store_config()  → RevisionStoreConfig → RevisionStore

Usage:
    # Load from environment variables:
    config = ZookeeperDeployConfig()

    # Load from YAML file:
    config = load_config("zkdeploy.yaml")

    # Explicit overrides:
    config = ZookeeperDeployConfig(key_prefix="my-app:index", allow_overwrite=True)

Environment Variables:
    ZKDEPLOY_CONNECT=zk1:2181,zk2:2181
    ZKDEPLOY_KEY_PREFIX=my-app:index
    ZKDEPLOY_ALLOW_OVERWRITE=true
    ZKDEPLOY_DIST_DIR=dist
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

from zkdeploy.core.exceptions import ConfigurationError

DEFAULT_REVISION_KEY = "default"
DEFAULT_RETENTION_SIZE = 10
DEFAULT_CONFIG_FILE = "zkdeploy.yaml"


# =============================================================================
# Revision Store Configuration
# =============================================================================
# The knobs of the revision-indexed store. These used to be ambient plugin
# defaults; they are now an explicit structure passed to RevisionStore.
# =============================================================================
class RevisionStoreConfig(BaseModel):
    """Configuration for a RevisionStore.

    Attributes:
        key_prefix: Namespace prepended to every key. Empty means keys are
            used as absolute paths directly.
        allow_overwrite: When False, uploading onto an occupied artifact
            path fails with NodeExistsError. When True, the content is
            overwritten.
        retention_size: Maximum number of non-active revision markers kept
            after a trim. The active revision is never counted or removed.
        default_revision_key: Revision key used when the caller gives none.
    """

    key_prefix: str = Field(
        default="",
        description="Namespace prefix for all keys",
    )
    allow_overwrite: bool = Field(
        default=False,
        description="Overwrite existing artifact nodes instead of failing",
    )
    retention_size: int = Field(
        default=DEFAULT_RETENTION_SIZE,
        ge=1,
        description="Maximum non-active revisions kept after a trim",
    )
    default_revision_key: str = Field(
        default=DEFAULT_REVISION_KEY,
        min_length=1,
        description="Revision key used when none is supplied",
    )


# =============================================================================
# Plugin Configuration
# =============================================================================
# Environment Variable Mapping:
#   ZKDEPLOY_CONNECT            → config.connect
#   ZKDEPLOY_KEY_PREFIX         → config.key_prefix
#   ZKDEPLOY_FILES='["a","b"]'  → config.files (JSON list)
# =============================================================================
class ZookeeperDeployConfig(BaseSettings):
    """Top-level configuration for the zookeeper deploy plugin.

    Attributes:
        connect: Connection string handed to the coordination client.
        connection_timeout: Client connection timeout in milliseconds.
            zkdeploy does not enforce it; the client does.
        key_prefix: Key under which revisions are stored. When unset, the
            plugin defaults it to "<project>:index" during configure.
        files: Files (relative to dist_dir) uploaded for each revision.
        dist_dir: Directory containing the built files.
        revision_key: Explicit revision key. When unset, the plugin resolves
            it from the command options or the pipeline revision data.
        allow_overwrite: See RevisionStoreConfig.allow_overwrite.
        did_deploy_message: Optional template for the post-deploy message,
            formatted with ``revision_key`` and ``deploy_target``.
        log_level: Logging level name.
    """

    connect: str = Field(
        default="localhost:2181",
        description="Coordination service connection string (host:port,...)",
    )
    connection_timeout: int = Field(
        default=10000,
        gt=0,
        description="Client connection timeout in milliseconds",
    )
    key_prefix: Optional[str] = Field(
        default=None,
        description="Key under which revisions are stored",
    )
    files: list[str] = Field(
        default_factory=lambda: ["index.html"],
        description="Files to upload, relative to dist_dir",
    )
    dist_dir: str = Field(
        default="tmp/deploy-dist",
        description="Directory containing the files to upload",
    )
    revision_key: Optional[str] = Field(
        default=None,
        description="Explicit revision key for this deploy",
    )
    allow_overwrite: bool = Field(
        default=False,
        description="Overwrite existing artifact nodes instead of failing",
    )
    did_deploy_message: Optional[str] = Field(
        default=None,
        description="Template for the message printed after deploy",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )

    model_config = {
        "env_prefix": "ZKDEPLOY_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
    }

    def store_config(self) -> RevisionStoreConfig:
        """Build the RevisionStoreConfig for this plugin configuration.

        The plugin uses ``key_prefix`` as the revision key itself, so the
        store's own namespace prefix stays empty.
        """
        return RevisionStoreConfig(allow_overwrite=self.allow_overwrite)


# =============================================================================
# Configuration Loader
# =============================================================================
def load_config(path: Optional[str] = None) -> ZookeeperDeployConfig:
    """Load plugin configuration from a YAML file and/or environment variables.

    Args:
        path: Path to a YAML configuration file. If None, looks for
            'zkdeploy.yaml' in the current directory and falls back to
            defaults + environment variables when it is absent.

    Returns:
        A validated ZookeeperDeployConfig instance.

    Raises:
        ConfigurationError: If the YAML file exists but is invalid.
        FileNotFoundError: If an explicit path is provided but doesn't exist.
    """
    if path is None:
        default_path = Path(DEFAULT_CONFIG_FILE)
        if default_path.exists():
            path = str(default_path)

    yaml_data: dict[str, Any] = {}
    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(config_path) as f:
            try:
                raw_data = yaml.safe_load(f)
            except yaml.YAMLError as exc:
                raise ConfigurationError(
                    message=f"Invalid YAML in configuration file: {path}",
                    details={"path": path, "error": str(exc)},
                ) from exc

        if raw_data is None:
            raw_data = {}
        if not isinstance(raw_data, dict):
            raise ConfigurationError(
                message=f"Configuration file must contain a mapping: {path}",
                details={"path": path, "type": type(raw_data).__name__},
            )
        yaml_data = raw_data

    return ZookeeperDeployConfig(**yaml_data)
