"""Tests for artifact snapshots and the store holding the latest one."""

import pytest

from artifact_sync.runtime.artifact_store import ArtifactSnapshot, ArtifactStore
from artifact_sync.schemas import Artifact

PY = Artifact(content="def a():\n    return 1", title="a_python", language="python")
JS = Artifact(content="const a = () => 1;", title="a_javascript", language="javascript")


class TestArtifactSnapshot:
    """Snapshot lookups and immutability."""

    def test_empty(self):
        snapshot = ArtifactSnapshot.empty()
        assert len(snapshot) == 0
        assert snapshot.artifacts() == []

    def test_preserves_detection_order(self):
        snapshot = ArtifactSnapshot([JS, PY])
        assert snapshot.artifacts() == [JS, PY]
        assert list(snapshot) == [JS, PY]

    def test_get_artifact(self):
        snapshot = ArtifactSnapshot([PY, JS])
        assert snapshot.get_artifact(PY.artifact_id) is PY
        assert snapshot.get_artifact("missing") is None
        assert JS.artifact_id in snapshot

    def test_get_artifacts_by_language(self):
        snapshot = ArtifactSnapshot([PY, JS])
        assert snapshot.get_artifacts_by_language("python") == [PY]
        assert snapshot.get_artifacts_by_language("go") == []

    def test_by_id_is_read_only(self):
        snapshot = ArtifactSnapshot([PY])
        with pytest.raises(TypeError):
            snapshot.by_id["other"] = JS  # type: ignore[index]

    def test_scan_metadata(self):
        snapshot = ArtifactSnapshot([PY], scan_id="scan-1")
        assert snapshot.scan_id == "scan-1"
        assert snapshot.created_at
        assert "scan-1" in repr(snapshot)


class TestArtifactStore:
    def test_starts_empty(self):
        assert len(ArtifactStore().current) == 0

    def test_replace_swaps_whole_snapshot(self):
        store = ArtifactStore()
        first = ArtifactSnapshot([PY])
        second = ArtifactSnapshot([JS])
        store.replace(first)
        previous = store.replace(second)
        assert previous is first
        assert store.current is second
        assert first.artifacts() == [PY]

    def test_clear(self):
        store = ArtifactStore(ArtifactSnapshot([PY]))
        store.clear()
        assert len(store.current) == 0
