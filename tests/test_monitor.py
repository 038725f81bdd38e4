"""Tests for the startup and debounced mutation scans."""

import asyncio

from artifact_sync.dom.soup import SoupDocument
from artifact_sync.runtime.artifact_store import ArtifactStore
from artifact_sync.runtime.monitor import Monitor
from artifact_sync.schemas import Settings
from tests.helpers.pages import JS_SNIPPET, SCENARIO_A_HTML, fast_pipeline

TWO_BLOCKS_HTML = SCENARIO_A_HTML.replace(
    "</body>", f'<pre><code class="language-javascript">{JS_SNIPPET}</code></pre></body>'
)


def make_monitor(document, scans, **kwargs):
    kwargs.setdefault("startup_delay", 0.01)
    kwargs.setdefault("debounce_delay", 0.01)
    return Monitor(document, fast_pipeline(), ArtifactStore(), on_scan=scans.append, **kwargs)


class TestMonitor:
    """Timers, debouncing and store replacement."""

    def test_startup_scan_fills_store(self):
        scans = []
        monitor = make_monitor(SoupDocument(SCENARIO_A_HTML), scans)

        async def run():
            await monitor.start()
            await asyncio.sleep(0.1)
            await monitor.wait_idle()
            await monitor.stop()

        asyncio.run(run())
        assert len(scans) == 1
        assert len(monitor.store.current) == 1

    def test_mutation_burst_scans_once(self):
        scans = []
        document = SoupDocument(SCENARIO_A_HTML)
        monitor = make_monitor(document, scans, startup_delay=10, debounce_delay=0.05)

        async def run():
            await monitor.start()
            for _ in range(5):
                document.mutate()
            await asyncio.sleep(0.2)
            await monitor.wait_idle()
            await monitor.stop()

        asyncio.run(run())
        assert len(scans) == 1

    def test_rescan_picks_up_new_blocks(self):
        scans = []
        document = SoupDocument(SCENARIO_A_HTML)
        monitor = make_monitor(document, scans, startup_delay=10)

        async def run():
            await monitor.start()
            first = await monitor.scan_now()
            document.replace_html(TWO_BLOCKS_HTML)
            await asyncio.sleep(0.1)
            await monitor.wait_idle()
            await monitor.stop()
            return first

        first = asyncio.run(run())
        assert len(first.artifacts) == 1
        assert len(monitor.store.current) == 2
        assert [artifact.language for artifact in scans[-1].new_artifacts] == ["javascript"]

    def test_no_scans_after_stop(self):
        scans = []
        document = SoupDocument(SCENARIO_A_HTML)
        monitor = make_monitor(document, scans)

        async def run():
            await monitor.start()
            await monitor.stop()
            document.mutate()
            await asyncio.sleep(0.1)

        asyncio.run(run())
        assert scans == []
        assert monitor.running is False

    def test_async_callback_awaited(self):
        seen = []

        async def on_scan(result):
            await asyncio.sleep(0)
            seen.append(len(result.artifacts))

        monitor = Monitor(SoupDocument(SCENARIO_A_HTML), fast_pipeline(), ArtifactStore(), on_scan=on_scan)
        asyncio.run(monitor.scan_now())
        assert seen == [1]

    def test_settings_gate_scans(self):
        document = SoupDocument(SCENARIO_A_HTML, url="https://example.com/")
        monitor = Monitor(document, fast_pipeline(), ArtifactStore(), settings=Settings)
        result = asyncio.run(monitor.scan_now())
        assert result.artifacts == []
        assert len(monitor.store.current) == 0
