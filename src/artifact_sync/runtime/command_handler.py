"""Dispatch inbound host commands to the monitor, pipeline and sync service."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any, Awaitable, Dict, List, Optional, Set
from zoneinfo import ZoneInfo

from pydantic import ValidationError

from artifact_sync.detection.scanner import SELECTORS
from artifact_sync.dom.base import Document
from artifact_sync.runtime.artifact_store import ArtifactStore
from artifact_sync.runtime.monitor import Monitor
from artifact_sync.runtime.pipeline import ArtifactPipeline, ScanResult
from artifact_sync.runtime.sync_client import ArtifactSyncClient, SyncService
from artifact_sync.schemas import (
    COMMAND_ADAPTER,
    DebugDetection,
    DetectArtifacts,
    Ping,
    SaveArtifact,
    Settings,
    SyncAll,
    ToggleMonitoring,
    UpdateProjectPath,
    UpdateSettings,
)
from artifact_sync.telemetry import EventBus
from artifact_sync.utils.text_analysis import looks_like_code

logger = logging.getLogger(__name__)

DEBUG_SAMPLE_COUNT = 3
DEBUG_PREVIEW_LENGTH = 100
CODE_ELEMENTS_SELECTOR = 'code, pre, .font-mono, [class*="code"]'


def _describe_validation_error(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "request"
    return f"Invalid command ({location}): {first.get('msg', 'invalid')}"


class CommandHandler:
    """Request/response facade used by the host.

    Every request is a dict tagged by ``action``; every response is a dict.
    Saves and batch syncs run in the background; :meth:`drain` awaits them.
    """

    def __init__(
        self,
        document: Document,
        pipeline: Optional[ArtifactPipeline] = None,
        store: Optional[ArtifactStore] = None,
        sync: Optional[SyncService] = None,
        settings: Optional[Settings] = None,
        bus: Optional[EventBus] = None,
        startup_delay: float = 1.0,
        debounce_delay: float = 0.5,
    ):
        self.document = document
        self.pipeline = pipeline or ArtifactPipeline()
        self.store = store or ArtifactStore()
        self.settings = settings or Settings()
        self.bus = bus or (sync.bus if sync is not None else EventBus())
        self.sync = sync or SyncService(ArtifactSyncClient(self.settings.server_url), self.bus)
        self.monitor = Monitor(
            document,
            self.pipeline,
            self.store,
            settings=lambda: self.settings,
            on_scan=self._on_monitor_scan,
            startup_delay=startup_delay,
            debounce_delay=debounce_delay,
        )
        self._background: Set[asyncio.Task] = set()

    async def handle(self, request: Any) -> Dict[str, Any]:
        try:
            command = COMMAND_ADAPTER.validate_python(request)
        except ValidationError as exc:
            message = _describe_validation_error(exc)
            logger.warning("Rejected command: %s", message)
            return {"success": False, "error": message}

        if isinstance(command, Ping):
            return {"success": True}

        if isinstance(command, ToggleMonitoring):
            self.settings = self.settings.model_copy(update={"is_enabled": command.enabled})
            await self._reconcile_monitor()
            return {"success": True}

        if isinstance(command, UpdateProjectPath):
            self.settings = self.settings.model_copy(update={"project_path": command.path})
            return {"success": True}

        if isinstance(command, UpdateSettings):
            merged = {**self.settings.model_dump(by_alias=True), **command.settings}
            try:
                self.settings = Settings.model_validate(merged)
            except ValidationError as exc:
                return {"success": False, "error": _describe_validation_error(exc)}
            self.sync.client.server_url = self.settings.server_url.rstrip("/")
            await self._reconcile_monitor()
            return {"success": True}

        if isinstance(command, DetectArtifacts):
            try:
                result = await self.detect()
            except Exception as exc:
                logger.exception("Artifact detection failed")
                return {"artifacts": [], "error": str(exc)}
            return {"artifacts": [artifact.to_wire() for artifact in result.artifacts]}

        if isinstance(command, DebugDetection):
            return {"debugInfo": await self.debug_info()}

        if isinstance(command, SaveArtifact):
            self._spawn(self.sync.save(command.artifact, self.settings))
            return {"success": True}

        if isinstance(command, SyncAll):
            self._spawn(self._sync_all())
            return {"success": True}

        return {"success": False, "error": f"Unhandled action: {command.action}"}  # pragma: no cover

    async def detect(self) -> ScanResult:
        """Run a scan now and replace the store with its snapshot."""
        result = await self.pipeline.scan(self.document, self.store.current, self.settings)
        self.store.replace(result.snapshot)
        return result

    async def debug_info(self) -> Dict[str, Any]:
        """Diagnostic snapshot of the document; does not scan."""
        validator = self.pipeline.validator
        elements_found: List[Dict[str, Any]] = []
        for selector in SELECTORS:
            try:
                elements = await self.document.query_all(selector)
            except Exception as exc:
                logger.debug("Selector %s failed during debug: %s", selector, exc)
                continue
            if not elements:
                continue
            samples = []
            for element in elements[:DEBUG_SAMPLE_COUNT]:
                text = await element.text_content()
                samples.append({
                    "tagName": element.tag.upper(),
                    "className": element.class_name,
                    "textPreview": text[:DEBUG_PREVIEW_LENGTH],
                    "hasCode": looks_like_code(text),
                    "isValid": validator.is_valid(text),
                })
            elements_found.append({"selector": selector, "count": len(elements), "elements": samples})

        return {
            "url": self.document.url,
            "title": await self.document.title(),
            "timestamp": datetime.now(ZoneInfo("UTC")).isoformat(),
            "totalElements": await self.document.count("*"),
            "preTags": await self.document.count("pre"),
            "fontMono": await self.document.count(".font-mono"),
            "codeElements": await self.document.count(CODE_ELEMENTS_SELECTOR),
            "elementsFound": elements_found,
            "artifactsFound": len(self.store.current),
        }

    async def drain(self) -> None:
        """Await background saves, monitor scans and pending style restorations."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)
        await self.monitor.wait_idle()
        await self.pipeline.revealer.drain()

    async def close(self) -> None:
        await self.monitor.stop()
        await self.drain()

    async def _reconcile_monitor(self) -> None:
        if self.settings.is_enabled and not self.monitor.running:
            await self.monitor.start()
        elif not self.settings.is_enabled and self.monitor.running:
            await self.monitor.stop()

    async def _on_monitor_scan(self, result: ScanResult) -> None:
        if self.settings.auto_sync and result.new_artifacts:
            await self.sync.save_all(result.new_artifacts, self.settings)

    async def _sync_all(self) -> None:
        try:
            result = await self.detect()
        except Exception as exc:
            logger.exception("Detection before sync failed")
            self.bus.sync_error(str(exc))
            return
        await self.sync.save_all(result.artifacts, self.settings)

    def _spawn(self, work: Awaitable[Any]) -> None:
        task = asyncio.ensure_future(work)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
