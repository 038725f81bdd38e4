"""Tests for candidate collection."""

import asyncio

from artifact_sync.detection.scanner import SELECTOR_GROUPS, SELECTORS, Scanner, scan_candidates
from artifact_sync.dom.soup import SoupDocument
from artifact_sync.schemas import SyncErrorCode, SyncErrorSource


def scan(document, **kwargs):
    return asyncio.run(Scanner(**kwargs).scan(document))


class TestSelectors:
    def test_flat_list_follows_group_order(self):
        flattened = [selector for _name, group in SELECTOR_GROUPS for selector in group]
        assert list(SELECTORS) == flattened
        assert SELECTOR_GROUPS[0][0] == "artifact_container"


class TestScanner:
    """Ordering, de-duplication and frames."""

    def test_candidates_in_priority_order(self):
        document = SoupDocument('<div class="artifact-view">A</div><pre><code>B</code></pre>')
        result = scan(document)
        assert [candidate.selector for candidate in result.candidates] == ['[class*="artifact"]', "pre code", "pre"]
        assert result.errors == []

    def test_node_matched_by_several_selectors_appears_once(self):
        document = SoupDocument('<div class="markdown"><pre>x</pre></div>')
        result = scan(document)
        pres = [candidate for candidate in result.candidates if candidate.element.tag == "pre"]
        assert len(pres) == 1
        assert pres[0].selector == "pre"

    def test_nothing_to_find(self):
        assert scan(SoupDocument("<p>hello</p>")).candidates == []

    def test_srcdoc_frame_is_scanned(self):
        document = SoupDocument('<iframe srcdoc="&lt;pre&gt;in frame&lt;/pre&gt;"></iframe>')

        async def run():
            result = await Scanner().scan(document)
            return [await candidate.element.text_content() for candidate in result.candidates]

        assert asyncio.run(run()) == ["in frame"]

    def test_cross_origin_frame_skipped(self):
        loaded = []

        def loader(url):
            loaded.append(url)
            return "<pre>secret</pre>"

        document = SoupDocument(
            '<iframe src="https://other.example/embed"></iframe>',
            url="https://claude.ai/chat/1",
            frame_loader=loader,
        )
        result = scan(document)
        assert result.candidates == []
        assert result.errors == []
        assert loaded == []

    def test_same_origin_frame_loaded(self):
        document = SoupDocument(
            '<iframe src="/embed"></iframe>',
            url="https://claude.ai/chat/1",
            frame_loader=lambda url: "<pre>from frame</pre>",
        )
        result = scan(document)
        assert len(result.candidates) == 1
        assert result.candidates[0].frame_url == "https://claude.ai/embed"

    def test_frame_depth_limit(self):
        document = SoupDocument('<iframe srcdoc="&lt;pre&gt;in frame&lt;/pre&gt;"></iframe>')
        assert scan(document, max_frame_depth=0).candidates == []

    def test_failing_selector_recorded_and_skipped(self):
        document = SoupDocument("<pre>x</pre>")
        result = scan(document, selectors=("[[[", "pre"))
        assert len(result.candidates) == 1
        assert len(result.errors) == 1
        error = result.errors[0]
        assert error.code == SyncErrorCode.SCAN
        assert error.source == SyncErrorSource.SCANNER
        assert error.details["selector"] == "[[["

    def test_scan_candidates_helper(self):
        candidates = asyncio.run(scan_candidates(SoupDocument("<pre>x</pre>")))
        assert [candidate.selector for candidate in candidates] == ["pre"]
