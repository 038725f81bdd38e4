"""Artifact store: immutable per-scan snapshots and the holder of the latest one."""

from __future__ import annotations

import uuid
from datetime import datetime
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional
from zoneinfo import ZoneInfo

from artifact_sync.schemas import Artifact


class ArtifactSnapshot:
    """Read-only view of the artifacts found by one scan.

    Snapshots are never mutated; every scan produces a new one and the
    :class:`ArtifactStore` swaps it in wholesale.
    """

    def __init__(self, artifacts: Iterable[Artifact] = (), scan_id: Optional[str] = None, created_at: Optional[str] = None):
        # artifact_id -> Artifact, insertion ordered
        by_id: Dict[str, Artifact] = {}
        for artifact in artifacts:
            by_id[artifact.artifact_id] = artifact
        self._artifacts: Mapping[str, Artifact] = MappingProxyType(by_id)
        self.scan_id = scan_id or str(uuid.uuid4())
        self.created_at = created_at or datetime.now(ZoneInfo("UTC")).isoformat()

    @classmethod
    def empty(cls) -> "ArtifactSnapshot":
        return cls(scan_id="empty")

    @property
    def by_id(self) -> Mapping[str, Artifact]:
        return self._artifacts

    def get_artifact(self, artifact_id: str) -> Optional[Artifact]:
        """Retrieve artifact by ID."""
        return self._artifacts.get(artifact_id)

    def get_artifacts_by_language(self, language: str) -> List[Artifact]:
        """Get all artifacts classified as ``language``."""
        return [artifact for artifact in self._artifacts.values() if artifact.language == language]

    def artifacts(self) -> List[Artifact]:
        """All artifacts in detection order."""
        return list(self._artifacts.values())

    def __len__(self) -> int:
        return len(self._artifacts)

    def __contains__(self, artifact_id: object) -> bool:
        return artifact_id in self._artifacts

    def __iter__(self) -> Iterator[Artifact]:
        return iter(self._artifacts.values())

    def __repr__(self) -> str:
        return f"ArtifactSnapshot(scan_id={self.scan_id!r}, artifacts={len(self)})"


class ArtifactStore:
    """Holds the latest snapshot; replaced atomically at the end of a scan."""

    def __init__(self, snapshot: Optional[ArtifactSnapshot] = None):
        self._snapshot = snapshot or ArtifactSnapshot.empty()

    @property
    def current(self) -> ArtifactSnapshot:
        return self._snapshot

    def replace(self, snapshot: ArtifactSnapshot) -> ArtifactSnapshot:
        """Swap in ``snapshot`` and return the one it replaced."""
        previous, self._snapshot = self._snapshot, snapshot
        return previous

    def clear(self) -> None:
        """Reset to an empty snapshot (useful for testing)."""
        self._snapshot = ArtifactSnapshot.empty()
