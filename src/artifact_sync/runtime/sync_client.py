"""Client for the file-persistence service and the save workflow built on it."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional, Tuple

from artifact_sync.exceptions import PersistenceError
from artifact_sync.schemas import Artifact, Settings
from artifact_sync.schemas.settings import DEFAULT_SERVER_URL
from artifact_sync.telemetry import EventBus

logger = logging.getLogger(__name__)

DEFAULT_PACE_DELAY = 0.1

# (method, url, json payload or None, timeout) -> (status code, decoded body)
Transport = Callable[[str, str, Optional[Dict[str, Any]], float], Tuple[int, Dict[str, Any]]]


class ArtifactSyncClient:
    """Blocking HTTP client; calls run in a worker thread from async code."""

    def __init__(
        self,
        server_url: str = DEFAULT_SERVER_URL,
        timeout: float = 30,
        health_timeout: float = 5,
        transport: Transport | None = None,
    ):
        self.server_url = server_url.rstrip("/")
        self.timeout = timeout
        self.health_timeout = health_timeout
        self.transport = transport or self._requests_transport

    def health(self) -> Dict[str, Any]:
        return self._call("GET", "/api/health", None, self.health_timeout)

    def is_healthy(self) -> bool:
        try:
            return self.health().get("status") == "ok"
        except PersistenceError as exc:
            logger.info("Persistence service unavailable: %s", exc)
            return False

    def save_artifact(self, artifact: Artifact, project_path: str) -> Dict[str, Any]:
        payload = {
            "content": artifact.content,
            "title": artifact.title,
            "language": artifact.language,
            "projectPath": project_path,
            "timestamp": artifact.timestamp,
        }
        return self._call("POST", "/api/artifact", payload, self.timeout)

    def test_path(self, path: str) -> bool:
        status, body = self.transport("POST", self._url("/api/test-path"), {"path": path}, self.timeout)
        if status == 404:
            return False
        if not 200 <= status < 300:
            raise PersistenceError(body.get("error") or f"HTTP {status}", status)
        return bool(body.get("valid"))

    def _url(self, path: str) -> str:
        return f"{self.server_url}{path}"

    def _call(self, method: str, path: str, payload: Optional[Dict[str, Any]], timeout: float) -> Dict[str, Any]:
        status, body = self.transport(method, self._url(path), payload, timeout)
        if not 200 <= status < 300:
            raise PersistenceError(body.get("error") or f"HTTP {status}", status)
        return body

    def _requests_transport(
        self, method: str, url: str, payload: Optional[Dict[str, Any]], timeout: float
    ) -> Tuple[int, Dict[str, Any]]:
        import requests

        try:
            resp = requests.request(method, url, json=payload, timeout=timeout)
        except requests.RequestException as exc:
            raise PersistenceError(f"Could not reach {url}: {exc}") from exc
        try:
            body = resp.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        return resp.status_code, body


class SyncService:
    """Save artifacts and report each outcome as an outbound event."""

    def __init__(
        self,
        client: ArtifactSyncClient,
        bus: EventBus,
        pace_delay: float = DEFAULT_PACE_DELAY,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.client = client
        self.bus = bus
        self.pace_delay = pace_delay
        self._sleep = sleep

    async def save(self, artifact: Artifact, settings: Settings) -> Optional[str]:
        """Save one artifact; returns the stored filename or None on failure."""
        if not settings.project_path:
            logger.warning("No project path set; not saving %s", artifact.title)
            self.bus.sync_error("No project path set")
            return None
        try:
            body = await asyncio.to_thread(self.client.save_artifact, artifact, settings.project_path)
        except PersistenceError as exc:
            logger.warning("Saving %s failed: %s", artifact.title, exc)
            self.bus.sync_error(exc.message)
            return None
        filename = str(body.get("filename", ""))
        logger.info("Artifact saved: %s", filename)
        self.bus.artifact_synced(filename)
        return filename

    async def save_all(self, artifacts: Iterable[Artifact], settings: Settings) -> int:
        """Save sequentially with pacing; failures do not stop the batch.

        Returns:
            Number of artifacts attempted, as reported in ``syncComplete``.
        """
        count = 0
        for artifact in artifacts:
            if count:
                await self._sleep(self.pace_delay)
            await self.save(artifact, settings)
            count += 1
        self.bus.sync_complete(count)
        return count
