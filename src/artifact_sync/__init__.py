"""Artifact Sync package root.

The public API surface is the pipeline, store, monitor and command handler
from ``artifact_sync.runtime``, the document backends from
``artifact_sync.dom`` and the schema types exposed in ``artifact_sync.schemas``.
"""

__version__ = "0.2.0"

from artifact_sync.dom import SoupDocument  # noqa: F401
from artifact_sync.runtime import (  # noqa: F401
    ArtifactPipeline,
    ArtifactSnapshot,
    ArtifactStore,
    ArtifactSyncClient,
    CommandHandler,
    Monitor,
    ScanResult,
    SyncService,
)
from artifact_sync.schemas import *  # noqa: F401,F403
from artifact_sync.schemas import __all__ as SCHEMA_EXPORTS
from artifact_sync.telemetry import EventBus  # noqa: F401

__all__ = [
    "__version__",
    "ArtifactPipeline",
    "ArtifactSnapshot",
    "ArtifactStore",
    "ArtifactSyncClient",
    "CommandHandler",
    "EventBus",
    "Monitor",
    "ScanResult",
    "SoupDocument",
    "SyncService",
] + SCHEMA_EXPORTS
