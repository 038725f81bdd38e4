"""Tests for the persistence client and the save workflow."""

import asyncio
from unittest.mock import MagicMock, Mock, patch

import pytest
import requests

from artifact_sync.exceptions import PersistenceError
from artifact_sync.runtime.sync_client import ArtifactSyncClient, SyncService
from artifact_sync.schemas import Artifact, Settings, SyncComplete, SyncError
from artifact_sync.telemetry import EventBus

ARTIFACT = Artifact(content="print('hello world')", title="hello", language="python")


def response(status, body):
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = body
    return resp


class TestArtifactSyncClient:
    """HTTP calls through an injected transport."""

    def test_health(self):
        transport = Mock(return_value=(200, {"status": "ok", "version": "1"}))
        client = ArtifactSyncClient("http://localhost:8765/", transport=transport)
        assert client.is_healthy() is True
        transport.assert_called_once_with("GET", "http://localhost:8765/api/health", None, 5)

    def test_unreachable_server_is_unhealthy(self):
        transport = Mock(side_effect=PersistenceError("refused"))
        assert ArtifactSyncClient(transport=transport).is_healthy() is False

    def test_save_payload(self):
        transport = Mock(return_value=(200, {"success": True, "filename": "hello.py"}))
        client = ArtifactSyncClient(transport=transport)
        body = client.save_artifact(ARTIFACT, "/tmp/project")
        assert body["filename"] == "hello.py"
        method, url, payload, timeout = transport.call_args.args
        assert method == "POST"
        assert url.endswith("/api/artifact")
        assert payload == {
            "content": ARTIFACT.content,
            "title": "hello",
            "language": "python",
            "projectPath": "/tmp/project",
            "timestamp": ARTIFACT.timestamp,
        }
        assert timeout == 30

    def test_error_status_raises_with_server_message(self):
        transport = Mock(return_value=(400, {"error": "Missing required fields"}))
        with pytest.raises(PersistenceError) as excinfo:
            ArtifactSyncClient(transport=transport).save_artifact(ARTIFACT, "/tmp")
        assert excinfo.value.message == "Missing required fields"
        assert excinfo.value.status_code == 400

    def test_error_status_without_body(self):
        transport = Mock(return_value=(502, {}))
        with pytest.raises(PersistenceError) as excinfo:
            ArtifactSyncClient(transport=transport).health()
        assert excinfo.value.message == "HTTP 502"

    def test_test_path(self):
        assert ArtifactSyncClient(transport=Mock(return_value=(200, {"valid": True}))).test_path("/tmp") is True
        assert ArtifactSyncClient(transport=Mock(return_value=(404, {"valid": False}))).test_path("/nope") is False
        with pytest.raises(PersistenceError):
            ArtifactSyncClient(transport=Mock(return_value=(500, {}))).test_path("/tmp")


class TestRequestsTransport:
    """Default transport built on requests."""

    def test_uses_requests(self):
        with patch("requests.request", return_value=response(200, {"status": "ok"})) as mock_request:
            assert ArtifactSyncClient().health() == {"status": "ok"}
        mock_request.assert_called_once_with("GET", "http://localhost:8765/api/health", json=None, timeout=5)

    def test_connection_error_becomes_persistence_error(self):
        with patch("requests.request", side_effect=requests.ConnectionError("refused")):
            with pytest.raises(PersistenceError) as excinfo:
                ArtifactSyncClient().health()
        assert excinfo.value.status_code is None
        assert "Could not reach" in excinfo.value.message

    def test_non_json_body(self):
        resp = response(500, None)
        resp.json.side_effect = ValueError("not json")
        with patch("requests.request", return_value=resp):
            with pytest.raises(PersistenceError) as excinfo:
                ArtifactSyncClient().health()
        assert excinfo.value.message == "HTTP 500"


class TestSyncService:
    """Per-artifact events and pacing."""

    def test_batch_is_paced_and_completes(self):
        delays = []

        async def fake_sleep(delay):
            delays.append(delay)

        transport = Mock(return_value=(200, {"filename": "hello.py"}))
        bus = EventBus()
        service = SyncService(ArtifactSyncClient(transport=transport), bus, sleep=fake_sleep)
        count = asyncio.run(service.save_all([ARTIFACT] * 3, Settings(project_path="/tmp/p")))
        assert count == 3
        assert delays == [0.1, 0.1]
        assert [event.action for event in bus.events] == ["artifactSynced"] * 3 + ["syncComplete"]

    def test_failures_do_not_stop_the_batch(self):
        transport = Mock(side_effect=[
            (200, {"filename": "a.py"}),
            (500, {"error": "disk full"}),
            (200, {"filename": "c.py"}),
        ])
        bus = EventBus()
        service = SyncService(ArtifactSyncClient(transport=transport), bus, pace_delay=0)
        asyncio.run(service.save_all([ARTIFACT] * 3, Settings(project_path="/tmp/p")))
        assert bus.events[1] == SyncError(error="disk full")
        assert bus.events[-1] == SyncComplete(count=3)

    def test_empty_batch(self):
        bus = EventBus()
        service = SyncService(ArtifactSyncClient(transport=Mock()), bus)
        assert asyncio.run(service.save_all([], Settings(project_path="/tmp/p"))) == 0
        assert bus.events == [SyncComplete(count=0)]
