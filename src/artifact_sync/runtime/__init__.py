"""Runtime: store, pipeline, monitor, persistence sync and command dispatch."""

from .artifact_store import ArtifactSnapshot, ArtifactStore
from .command_handler import CommandHandler
from .monitor import Monitor
from .pipeline import ArtifactPipeline, Rejection, ScanResult
from .sync_client import ArtifactSyncClient, SyncService

__all__ = [
    "ArtifactPipeline",
    "ArtifactSnapshot",
    "ArtifactStore",
    "ArtifactSyncClient",
    "CommandHandler",
    "Monitor",
    "Rejection",
    "ScanResult",
    "SyncService",
]
