"""
zkdeploy.core - Foundation Layer
==================================

The building blocks every other zkdeploy module depends on:

    - paths:       Node path scheme (pure functions)
    - config:      RevisionStoreConfig, ZookeeperDeployConfig, load_config
    - models:      RevisionRecord, UploadedFile, DeployContext
    - exceptions:  Structured exception hierarchy

Dependency Rule:
    core/ depends on nothing else in the zkdeploy package and performs no
    I/O beyond reading a configuration file.
"""

from zkdeploy.core.config import (
    RevisionStoreConfig,
    ZookeeperDeployConfig,
    load_config,
)
from zkdeploy.core.exceptions import (
    ConfigurationError,
    InvalidKeyError,
    InvalidRevisionError,
    NodeExistsError,
    NoNodeError,
    StoreError,
    ZkDeployError,
)
from zkdeploy.core.models import DeployContext, RevisionRecord, UploadedFile

__all__ = [
    # Config
    "RevisionStoreConfig",
    "ZookeeperDeployConfig",
    "load_config",
    # Exceptions
    "ConfigurationError",
    "InvalidKeyError",
    "InvalidRevisionError",
    "NodeExistsError",
    "NoNodeError",
    "StoreError",
    "ZkDeployError",
    # Models
    "DeployContext",
    "RevisionRecord",
    "UploadedFile",
]
