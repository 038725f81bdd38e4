"""Keep the artifact store current while a document changes."""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Callable, Optional, Set

from artifact_sync.dom.base import Document, Subscription
from artifact_sync.runtime.artifact_store import ArtifactStore
from artifact_sync.runtime.pipeline import ArtifactPipeline, ScanResult
from artifact_sync.schemas import Settings

logger = logging.getLogger(__name__)

DEFAULT_STARTUP_DELAY = 1.0
DEFAULT_DEBOUNCE_DELAY = 0.5


class Monitor:
    """Scan on a startup timer and after debounced document mutations.

    Args:
        document: Document to watch.
        pipeline: Pipeline used for every scan.
        store: Store replaced with each scan's snapshot.
        settings: Callable returning the settings to scan with.
        on_scan: Called with every :class:`ScanResult`; may be async.
    """

    def __init__(
        self,
        document: Document,
        pipeline: ArtifactPipeline,
        store: ArtifactStore,
        settings: Optional[Callable[[], Settings]] = None,
        on_scan: Optional[Callable[[ScanResult], Any]] = None,
        startup_delay: float = DEFAULT_STARTUP_DELAY,
        debounce_delay: float = DEFAULT_DEBOUNCE_DELAY,
    ):
        self.document = document
        self.pipeline = pipeline
        self.store = store
        self._settings = settings
        self.on_scan = on_scan
        self.startup_delay = startup_delay
        self.debounce_delay = debounce_delay

        self._running = False
        self._subscription: Optional[Subscription] = None
        self._startup: Optional[asyncio.Task] = None
        self._debounce: Optional[asyncio.Task] = None
        self._inflight: Set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._subscription = await self.document.observe(self._on_mutation)
        self._startup = asyncio.create_task(self._scan_after(self.startup_delay))
        logger.info("Monitoring started")

    async def stop(self) -> None:
        """Disconnect the observer and cancel timers; in-flight scans still finish."""
        if not self._running:
            return
        self._running = False
        for timer in (self._startup, self._debounce):
            if timer is not None and not timer.done():
                timer.cancel()
        self._startup = self._debounce = None
        if self._subscription is not None:
            await self._subscription.close()
            self._subscription = None
        logger.info("Monitoring stopped")

    async def scan_now(self) -> ScanResult:
        task = asyncio.ensure_future(self._scan())
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        # Cancelling a timer must not abort a scan that already started.
        return await asyncio.shield(task)

    async def wait_idle(self) -> None:
        while self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    def _on_mutation(self) -> None:
        if not self._running:
            return
        if self._debounce is not None and not self._debounce.done():
            self._debounce.cancel()
        self._debounce = asyncio.get_running_loop().create_task(self._scan_after(self.debounce_delay))

    async def _scan_after(self, delay: float) -> None:
        await asyncio.sleep(delay)
        if not self._running:
            return
        try:
            await self.scan_now()
        except Exception:
            logger.exception("Background scan failed")

    async def _scan(self) -> ScanResult:
        settings = self._settings() if self._settings is not None else None
        result = await self.pipeline.scan(self.document, self.store.current, settings)
        self.store.replace(result.snapshot)
        if self.on_scan is not None:
            outcome = self.on_scan(result)
            if inspect.isawaitable(outcome):
                await outcome
        return result
