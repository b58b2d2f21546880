"""
zkdeploy.facade - Zookeeper Deploy Plugin
===========================================

This module implements ZookeeperDeployPlugin, the thin layer the host
deploy pipeline talks to. Each pipeline lifecycle hook maps onto one
RevisionStore operation; the plugin only adds revision-key resolution,
file reading and the post-deploy message.

Architecture Context:
    ┌──────────────────────────────────────────────────┐
    │          Host deploy pipeline (hooks)             │
    │  configure → willDeploy → upload → willActivate   │
    │  → activate → didDeploy        fetchRevisions     │
    └───────────────────────┬──────────────────────────┘
                            │ DeployContext
    ┌───────────────────────▼──────────────────────────┐
    │          ZookeeperDeployPlugin (facade)           │
    └───────────────────────┬──────────────────────────┘
                            │
    ┌───────────────────────▼──────────────────────────┐
    │   RevisionStore → PathEnsurer → NodeStore         │
    └──────────────────────────────────────────────────┘

Hook Results:
    Hooks return plain dicts that the host merges into its pipeline context,
    e.g. ``{"revision_data": {"activated_revision_key": "abc"}}``.

Usage:
    >>> plugin = ZookeeperDeployPlugin(node_store, config)
    >>> async with plugin:
    ...     plugin.configure(context)
    ...     await plugin.will_deploy(context)
    ...     await plugin.upload(context)
    ...     await plugin.activate(context)
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Optional

import structlog

from zkdeploy.core.config import ZookeeperDeployConfig
from zkdeploy.core.exceptions import ConfigurationError
from zkdeploy.core.models import DeployContext, UploadedFile
from zkdeploy.infrastructure.node_store import NodeStore
from zkdeploy.orchestration.revision_store import RevisionStore


# =============================================================================
# Logger
# =============================================================================
logger = structlog.get_logger()


class _KeepUnknownFields(dict):
    """Format mapping that leaves unknown ``{placeholders}`` in place."""

    def __missing__(self, key: str) -> str:
        return "{" + str(key) + "}"


# Options reported when they fall back to their default during configure.
_OPTIONAL_SETTINGS = (
    "connect",
    "connection_timeout",
    "key_prefix",
    "files",
    "dist_dir",
    "revision_key",
    "allow_overwrite",
    "did_deploy_message",
)


class ZookeeperDeployPlugin:
    """Deploy pipeline plugin storing revisions in a coordination store.

    Lifecycle:
        1. ``ZookeeperDeployPlugin(node_store, config)``
        2. ``await connect()`` (or ``async with plugin``)
        3. hooks, in pipeline order
        4. ``await disconnect()``

    Attributes:
        _config: Plugin configuration.
        _node_store: Coordination client adapter.
        _revision_store: Revision logic over ``_node_store``.
        _connected: Whether connect() has been called.
    """

    def __init__(
        self,
        node_store: NodeStore,
        config: Optional[ZookeeperDeployConfig] = None,
        *,
        name: str = "zookeeper",
    ) -> None:
        """Initialize the plugin.

        Args:
            node_store: Adapter over the coordination client.
            config: Plugin configuration. Defaults to ZookeeperDeployConfig(),
                which reads ZKDEPLOY_* environment variables.
            name: Plugin name as registered with the pipeline.
        """
        self.name = name
        self._config = config or ZookeeperDeployConfig()
        self._node_store = node_store
        self._revision_store = RevisionStore(node_store, self._config.store_config())
        self._connected = False
        self._logger = logger.bind(component="zookeeper_deploy_plugin", plugin=name)

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def config(self) -> ZookeeperDeployConfig:
        return self._config

    @property
    def revision_store(self) -> RevisionStore:
        return self._revision_store

    # =========================================================================
    # Lifecycle Management
    # =========================================================================

    async def connect(self) -> None:
        """Open the coordination store session. Idempotent."""
        if self._connected:
            return
        await self._node_store.connect()
        self._connected = True
        self._logger.info("plugin_connected", connect=self._config.connect)

    async def disconnect(self) -> None:
        """Close the coordination store session. Idempotent."""
        if not self._connected:
            return
        await self._node_store.disconnect()
        self._connected = False
        self._logger.info("plugin_disconnected")

    async def __aenter__(self) -> ZookeeperDeployPlugin:
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.disconnect()

    # =========================================================================
    # Configuration Resolution
    # =========================================================================

    def key_prefix(self, context: DeployContext) -> str:
        """Key the revisions of this project live under."""
        return self._config.key_prefix or f"{context.project_name}:index"

    def revision_key(self, context: DeployContext) -> Optional[str]:
        """Resolve the revision key for this run.

        Priority: explicit configuration, then the ``revision`` command
        option, then the revision data of earlier plugins.
        """
        return (
            self._config.revision_key
            or context.command_options.get("revision")
            or context.revision_data.get("revision_key")
        )

    def configure(self, context: DeployContext) -> dict[str, Any]:
        """Report options left at their defaults and return the resolved ones."""
        explicit = self._config.model_fields_set
        for option in _OPTIONAL_SETTINGS:
            if option in explicit:
                continue
            default = getattr(self._config, option)
            if option == "key_prefix":
                default = self.key_prefix(context)
            self._logger.info("missing_config_using_default", option=option, default=default)

        return {
            "key_prefix": self.key_prefix(context),
            "revision_key": self.revision_key(context),
        }

    # =========================================================================
    # Pipeline Hooks
    # =========================================================================

    async def will_deploy(self, context: DeployContext) -> dict[str, Any]:
        """Make sure the key and its revisions container exist."""
        key = self.key_prefix(context)
        self._logger.info("validating_required_paths", key=key)
        created = await self._revision_store.will_deploy(key)
        return {"created_paths": created}

    async def upload(self, context: DeployContext) -> dict[str, Any]:
        """Upload every configured file, then record and trim the revision.

        Raises:
            NodeExistsError: If a file of this revision was already uploaded
                and ``allow_overwrite`` is off.
            FileNotFoundError: If a configured file is missing from dist_dir.
        """
        key = self.key_prefix(context)
        revision_key = self.revision_key(context)
        dist_dir = Path(self._config.dist_dir)

        uploads: list[UploadedFile] = []
        for filename in self._config.files:
            content = await asyncio.to_thread(self._read_file, dist_dir / filename)
            path = await self._revision_store.upload(
                key, filename, content, revision_key=revision_key
            )
            uploads.append(UploadedFile(zk_key=path))

        await self._revision_store.trim_recent_uploads(key, revision_key)
        self._logger.info("upload_complete", key=key, files=len(uploads))
        return {"uploads": uploads}

    async def will_activate(self, context: DeployContext) -> dict[str, Any]:
        """Capture the currently active revision before activation."""
        previous = await self._revision_store.active_revision(self.key_prefix(context))
        return {"revision_data": {"previous_revision_key": previous}}

    async def activate(self, context: DeployContext) -> dict[str, Any]:
        """Activate the resolved revision.

        Raises:
            InvalidRevisionError: If the revision was never uploaded.
        """
        key = self.key_prefix(context)
        revision_key = self._revision_store.resolve_revision_key(self.revision_key(context))
        self._logger.info("activating_revision", key=key, revision_key=revision_key)
        activated = await self._revision_store.activate(key, revision_key)
        return {"revision_data": {"activated_revision_key": activated}}

    def did_deploy(self, context: DeployContext) -> Optional[str]:
        """Build the message shown once the deploy finished.

        Returns:
            The configured message, the "did not activate" hint when the
            revision was deployed without activation, or None.
        """
        revision_key = context.revision_data.get("revision_key")
        activated = context.revision_data.get("activated_revision_key")

        if self._config.did_deploy_message is not None:
            message: Optional[str] = self._render_message(
                self._config.did_deploy_message,
                revision_key=revision_key,
                deploy_target=context.deploy_target,
            )
        elif revision_key and not activated:
            message = (
                f"Deployed but did not activate revision {revision_key}.\n"
                f"To activate, run: ember deploy:activate {context.deploy_target} "
                f"--revision={revision_key}\n"
            )
        else:
            message = None

        if message:
            self._logger.info("did_deploy", message=message)
        return message

    async def fetch_revisions(self, context: DeployContext) -> dict[str, Any]:
        """List the revision history of this project."""
        revisions = await self._revision_store.fetch_revisions(self.key_prefix(context))
        return {"revisions": revisions}

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _read_file(path: Path) -> bytes:
        return path.read_bytes()

    @staticmethod
    def _render_message(template: str, **fields: Any) -> str:
        """Fill ``{revision_key}`` and ``{deploy_target}`` into ``template``.

        Unknown named placeholders are kept verbatim.

        Raises:
            ConfigurationError: If the template is not a valid format string,
                e.g. it uses positional ``{}`` fields or unbalanced braces.
        """
        try:
            return template.format_map(_KeepUnknownFields(fields))
        except (AttributeError, IndexError, ValueError) as exc:
            raise ConfigurationError(
                message=f"Invalid did_deploy_message template: {exc}",
                details={"did_deploy_message": template},
            ) from exc

    def __repr__(self) -> str:
        return (
            f"ZookeeperDeployPlugin(name={self.name!r}, "
            f"connect={self._config.connect!r}, "
            f"connected={self._connected})"
        )
