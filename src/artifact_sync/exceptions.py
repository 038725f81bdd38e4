"""
Custom exception classes for Artifact Sync.

This module defines structured exception types for config loading, document
access, and persistence errors.
"""

from typing import Optional


class ArtifactSyncError(Exception):
    """Base exception for all Artifact Sync errors."""
    pass


class ConfigLoadError(ArtifactSyncError):
    """Error loading a configuration file."""

    def __init__(self, file_name: str, message: str):
        self.file_name = file_name
        self.message = message
        super().__init__(f"Error loading {file_name}: {message}")


class CrossOriginFrameError(ArtifactSyncError):
    """An embedded frame belongs to another origin and cannot be read."""

    def __init__(self, frame_url: Optional[str]):
        self.frame_url = frame_url
        super().__init__(f"Cross-origin frame: {frame_url or '<unknown>'}")


class ElementAccessError(ArtifactSyncError):
    """Reading from a document element failed (detached, unreadable, ...)."""
    pass


class PersistenceError(ArtifactSyncError):
    """The persistence service rejected a request or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        if status_code is not None:
            super().__init__(f"Persistence error ({status_code}): {message}")
        else:
            super().__init__(f"Persistence error: {message}")
