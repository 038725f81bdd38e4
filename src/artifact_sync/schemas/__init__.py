"""Schema exports."""

from .artifact import Artifact
from .base import SchemaBase, Severity
from .commands import (
    COMMAND_ADAPTER,
    Command,
    DebugDetection,
    DetectArtifacts,
    Ping,
    SaveArtifact,
    SyncAll,
    ToggleMonitoring,
    UpdateProjectPath,
    UpdateSettings,
)
from .errors import SyncErrorCode, SyncErrorRecord, SyncErrorSource, make_error
from .events import ArtifactSynced, OutboundEvent, SyncComplete, SyncError, SyncedFile
from .settings import DEFAULT_SERVER_URL, Settings

__all__ = [
    "Artifact",
    "SchemaBase",
    "Severity",
    "COMMAND_ADAPTER",
    "Command",
    "DebugDetection",
    "DetectArtifacts",
    "Ping",
    "SaveArtifact",
    "SyncAll",
    "ToggleMonitoring",
    "UpdateProjectPath",
    "UpdateSettings",
    "SyncErrorCode",
    "SyncErrorRecord",
    "SyncErrorSource",
    "make_error",
    "ArtifactSynced",
    "OutboundEvent",
    "SyncComplete",
    "SyncError",
    "SyncedFile",
    "DEFAULT_SERVER_URL",
    "Settings",
]
