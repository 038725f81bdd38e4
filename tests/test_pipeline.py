"""End-to-end tests for a single scan over saved pages."""

import asyncio

from artifact_sync.dom.soup import SoupDocument
from artifact_sync.schemas import Settings, SyncErrorCode, SyncErrorSource
from tests.helpers.pages import (
    CHAT_PAGE_HTML,
    CSS_DUMP_LINE,
    JS_SNIPPET,
    PYTHON_SNIPPET,
    SCENARIO_A_HTML,
    fast_pipeline,
)


def run_scan(document, pipeline=None, **kwargs):
    pipeline = pipeline or fast_pipeline()

    async def run():
        result = await pipeline.scan(document, **kwargs)
        await pipeline.revealer.drain()
        return result

    return asyncio.run(run())


class BrokenTitler:
    async def title(self, element, text, language):
        raise RuntimeError("boom")


class TestPipelineScenarios:
    """Realistic pages through every stage."""

    def test_highlighted_python_block(self):
        result = run_scan(SoupDocument(SCENARIO_A_HTML))
        assert len(result.artifacts) == 1
        artifact = result.artifacts[0]
        assert artifact.content == PYTHON_SNIPPET
        assert artifact.language == "python"
        assert artifact.title == "foo_python"
        assert artifact.content_length == len(PYTHON_SNIPPET)

    def test_stylesheet_dump_rejected(self):
        css = "\n".join([CSS_DUMP_LINE] * 10)
        result = run_scan(SoupDocument(f'<div class="font-mono">{css}</div>'))
        assert result.artifacts == []
        assert [rejection.reason for rejection in result.rejections] == ["css_dominant"]
        assert result.rejections[0].selector == ".font-mono"
        assert len(result.rejections[0].preview) <= 80

    def test_chat_page(self):
        result = run_scan(SoupDocument(CHAT_PAGE_HTML))
        assert len(result.artifacts) == 1
        artifact = result.artifacts[0]
        assert artifact.content == JS_SNIPPET
        assert artifact.language == "javascript"
        assert artifact.title == "Here_is_a_small_debounce_helper"
        assert "css_dominant" in [rejection.reason for rejection in result.rejections]

    def test_empty_page(self):
        result = run_scan(SoupDocument("<html><body><p>nothing here</p></body></html>"))
        assert result.artifacts == []
        assert len(result.snapshot) == 0


class TestRescans:
    def test_rescan_is_idempotent(self):
        document = SoupDocument(SCENARIO_A_HTML)
        pipeline = fast_pipeline()
        first = run_scan(document, pipeline)
        second = run_scan(document, pipeline, previous=first.snapshot)
        assert second.artifacts[0] is first.artifacts[0]
        assert second.new_artifacts == []

    def test_grown_block_replaces_stale_content(self):
        body = "def build_report(rows):\n" + "".join(f"    total_{n} = sum(row[{n}] for row in rows)\n" for n in range(6))
        grown = body + "    return total_0 + total_1"
        page = '<html><body><pre><code class="language-python">{}</code></pre></body></html>'
        document = SoupDocument(page.format(body.rstrip()))
        pipeline = fast_pipeline()
        first = run_scan(document, pipeline)
        document.replace_html(page.format(grown))
        second = run_scan(document, pipeline, previous=first.snapshot)
        [artifact] = second.artifacts
        assert artifact.content == grown
        assert second.new_artifacts == [artifact]
        assert artifact.artifact_id not in first.snapshot

    def test_first_scan_reports_everything_as_new(self):
        result = run_scan(SoupDocument(SCENARIO_A_HTML))
        assert result.new_artifacts == result.artifacts

    def test_snapshot_matches_artifacts(self):
        result = run_scan(SoupDocument(SCENARIO_A_HTML))
        assert result.snapshot.artifacts() == result.artifacts


class TestGatingAndErrors:
    def test_disallowed_host_skips_scan(self):
        document = SoupDocument(SCENARIO_A_HTML, url="https://example.com/page")
        result = run_scan(document, settings=Settings())
        assert result.artifacts == []
        assert result.rejections == []

    def test_allowed_host_scanned(self):
        document = SoupDocument(SCENARIO_A_HTML, url="https://claude.ai/chat/42")
        assert len(run_scan(document, settings=Settings()).artifacts) == 1

    def test_candidate_failure_recorded(self):
        pipeline = fast_pipeline(titler=BrokenTitler())
        result = run_scan(SoupDocument(SCENARIO_A_HTML), pipeline)
        assert result.artifacts == []
        assert result.errors
        assert all(error.code == SyncErrorCode.EXTRACTION for error in result.errors)
        assert result.errors[0].source == SyncErrorSource.PIPELINE
