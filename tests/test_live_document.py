"""Tests for the Playwright document backend against mocked handles."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from artifact_sync.dom import scripts
from artifact_sync.dom.live import LiveDocument, LiveElement, LiveFrame
from artifact_sync.exceptions import ArtifactSyncError, CrossOriginFrameError, ElementAccessError

PRE_INFO = {"key": 1, "tag": "pre", "className": "language-python", "attributes": {"class": "language-python"}}


def make_handle(info=PRE_INFO, fails=False):
    handle = MagicMock()
    if fails:
        handle.evaluate = AsyncMock(side_effect=RuntimeError("detached"))
    else:
        handle.evaluate = AsyncMock(return_value=info)
    handle.text_content = AsyncMock(return_value=None)
    return handle


def make_frame(url="https://claude.ai/chat/1", handles=()):
    frame = MagicMock()
    frame.url = url
    frame.query_selector_all = AsyncMock(return_value=list(handles))
    frame.evaluate = AsyncMock(return_value=None)
    frame.child_frames = []
    return frame


class TestLiveElement:
    def test_metadata_cached_from_page(self):
        document = LiveDocument(make_frame())
        element = asyncio.run(LiveElement.create(make_handle(), document))
        assert element.tag == "pre"
        assert element.class_name == "language-python"
        assert element.get_attribute("class") == "language-python"
        assert element.key == (id(document.frame), 1)

    def test_detached_handle(self):
        with pytest.raises(ElementAccessError):
            asyncio.run(LiveElement.create(make_handle(fails=True), LiveDocument(make_frame())))

    def test_missing_text_content_is_empty(self):
        element = asyncio.run(LiveElement.create(make_handle(), LiveDocument(make_frame())))
        assert asyncio.run(element.text_content()) == ""


class TestLiveDocument:
    """Document-level queries, frames and observation."""

    def test_query_all_skips_detached(self):
        frame = make_frame(handles=[make_handle(), make_handle(fails=True)])
        elements = asyncio.run(LiveDocument(frame).query_all("pre"))
        assert [element.tag for element in elements] == ["pre"]

    def test_cross_origin_frame(self):
        parent = LiveDocument(make_frame())
        with pytest.raises(CrossOriginFrameError):
            asyncio.run(LiveFrame(parent, make_frame("https://other.example/embed")).open())

    def test_same_origin_and_blank_frames_open(self):
        parent = LiveDocument(make_frame())
        same = asyncio.run(LiveFrame(parent, make_frame("https://claude.ai/embed")).open())
        blank = asyncio.run(LiveFrame(parent, make_frame("about:blank")).open())
        assert same.url == "https://claude.ai/embed"
        assert blank.url == "about:blank"

    def test_observe_needs_page(self):
        with pytest.raises(ArtifactSyncError):
            asyncio.run(LiveDocument(make_frame()).observe(lambda: None))

    def test_observe_binds_once_and_dispatches(self):
        page = MagicMock()
        page.expose_binding = AsyncMock()
        frame = make_frame()
        page.main_frame = frame
        document = LiveDocument.from_page(page)
        calls = []

        async def go():
            first = await document.observe(lambda: calls.append("a"))
            await document.observe(lambda: calls.append("b"))
            document._on_mutation(None)
            await first.close()
            document._on_mutation(None)

        asyncio.run(go())
        page.expose_binding.assert_awaited_once()
        assert page.expose_binding.call_args.args[0] == scripts.MUTATION_BINDING
        assert calls == ["a", "b", "b"]
