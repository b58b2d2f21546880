"""
Deploy and Rollback Example — Revisions in an In-Memory Store
===============================================================

This example walks a project through three deploys and a rollback using
the RevisionStore directly, with a small retention size so trimming is
visible.

Usage:
    python examples/deploy_and_rollback.py
"""

from __future__ import annotations

import asyncio

from zkdeploy.core.config import RevisionStoreConfig
from zkdeploy.infrastructure.node_store import InMemoryNodeStore
from zkdeploy.orchestration.revision_store import RevisionStore


async def main() -> None:
    """Upload, activate, trim and roll back a few revisions."""
    node_store = InMemoryNodeStore()
    store = RevisionStore(node_store, RevisionStoreConfig(retention_size=2))

    await store.will_deploy("shop:index")

    for revision in ["r1", "r2", "r3"]:
        await store.upload(
            "shop:index",
            "index.html",
            f"<html><body>{revision}</body></html>",
            revision_key=revision,
        )
        removed = await store.trim_recent_uploads("shop:index", revision)
        await store.activate("shop:index", revision)
        print(f"deployed {revision}, trimmed {removed or 'nothing'}")

    # Roll back to the previous revision.
    await store.activate("shop:index", "r2")

    print("\nRevisions:")
    for record in await store.fetch_revisions("shop:index"):
        marker = "*" if record.active else " "
        print(f"  {marker} {record.revision}  {record.timestamp}")

    print("\nNodes:")
    for path, payload in node_store.snapshot().items():
        print(f"  {path} = {payload[:40]!r}")


if __name__ == "__main__":
    asyncio.run(main())
