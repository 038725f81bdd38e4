"""Playwright-backed document for monitoring a page in a real browser."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Dict, Hashable, List, Mapping, Optional, Tuple
from urllib.parse import urlparse

from artifact_sync.exceptions import ArtifactSyncError, CrossOriginFrameError, ElementAccessError
from artifact_sync.dom import scripts

if TYPE_CHECKING:
    from playwright.async_api import ElementHandle, Frame, Page

logger = logging.getLogger(__name__)


def _origin(url: str) -> Tuple[str, str, Optional[int]]:
    parsed = urlparse(url)
    return parsed.scheme, (parsed.hostname or "").lower(), parsed.port


class LiveElement:
    def __init__(self, handle: "ElementHandle", document: "LiveDocument", info: Dict[str, Any]):
        self._handle = handle
        self._document = document
        self._info = info

    @classmethod
    async def create(cls, handle: "ElementHandle", document: "LiveDocument") -> "LiveElement":
        try:
            info = await handle.evaluate(scripts.ELEMENT_INFO_JS)
        except Exception as exc:
            raise ElementAccessError(f"Could not read element metadata: {exc}") from exc
        return cls(handle, document, info)

    def __repr__(self) -> str:
        return f"LiveElement(<{self.tag} class={self.class_name!r}>)"

    @property
    def key(self) -> Hashable:
        return (id(self._document.frame), self._info["key"])

    @property
    def tag(self) -> str:
        return self._info["tag"]

    @property
    def class_name(self) -> str:
        return self._info.get("className") or ""

    @property
    def attributes(self) -> Dict[str, str]:
        return dict(self._info.get("attributes") or {})

    def get_attribute(self, name: str) -> Optional[str]:
        return (self._info.get("attributes") or {}).get(name)

    async def _related(self, script: str) -> Optional["LiveElement"]:
        related = await self._handle.evaluate_handle(script)
        element = related.as_element()
        if element is None:
            return None
        return await LiveElement.create(element, self._document)

    async def parent(self) -> Optional["LiveElement"]:
        return await self._related(scripts.PARENT_JS)

    async def previous_sibling(self) -> Optional["LiveElement"]:
        return await self._related(scripts.PREVIOUS_SIBLING_JS)

    async def query(self, selector: str) -> Optional["LiveElement"]:
        handle = await self._handle.query_selector(selector)
        return await LiveElement.create(handle, self._document) if handle is not None else None

    async def query_all(self, selector: str) -> List["LiveElement"]:
        handles = await self._handle.query_selector_all(selector)
        return [await LiveElement.create(handle, self._document) for handle in handles]

    async def text_content(self) -> str:
        return await self._handle.text_content() or ""

    async def inner_text(self) -> str:
        return await self._handle.evaluate(scripts.INNER_TEXT_JS)

    async def inner_html(self) -> str:
        return await self._handle.inner_html()

    async def value(self) -> Optional[str]:
        return await self._handle.evaluate(scripts.VALUE_JS)

    async def computed_style(self) -> Dict[str, str]:
        return await self._handle.evaluate(scripts.COMPUTED_STYLE_JS)

    async def scroll_size(self) -> Tuple[int, int]:
        scroll_height, client_height = await self._handle.evaluate(scripts.SCROLL_SIZE_JS)
        return int(scroll_height), int(client_height)

    async def click(self) -> None:
        await self._handle.evaluate(scripts.CLICK_JS)

    async def apply_styles(self, styles: Mapping[str, str]) -> Dict[str, str]:
        return await self._handle.evaluate(scripts.APPLY_STYLES_JS, dict(styles))

    async def restore_styles(self, previous: Mapping[str, str]) -> None:
        await self._handle.evaluate(scripts.RESTORE_STYLES_JS, dict(previous))

    async def scroll_to_end(self) -> None:
        await self._handle.evaluate(scripts.SCROLL_TO_END_JS)

    async def preceding_text(self, container: "LiveElement") -> List[str]:
        return await container._handle.evaluate(scripts.PRECEDING_TEXT_JS, self._handle)


class LiveSubscription:
    def __init__(self, document: "LiveDocument", callback: Callable[[], None]):
        self._document = document
        self._callback = callback

    async def close(self) -> None:
        await self._document.unobserve(self._callback)


class LiveFrame:
    def __init__(self, parent: "LiveDocument", frame: "Frame"):
        self._parent = parent
        self._frame = frame

    @property
    def url(self) -> Optional[str]:
        return self._frame.url or None

    async def open(self) -> "LiveDocument":
        url = self._frame.url or ""
        parent_url = self._parent.url or ""
        if url and not url.startswith("about:"):
            if _origin(url) != _origin(parent_url):
                raise CrossOriginFrameError(url)
        return LiveDocument(self._frame, page=self._parent.page)


class LiveDocument:
    """Document over a Playwright frame (the page's main frame by default)."""

    def __init__(self, frame: "Frame", page: Optional["Page"] = None):
        self.frame = frame
        self.page = page
        self._observers: List[Callable[[], None]] = []
        self._binding_ready = False

    @classmethod
    def from_page(cls, page: "Page") -> "LiveDocument":
        return cls(page.main_frame, page=page)

    @property
    def url(self) -> Optional[str]:
        return self.frame.url or None

    async def title(self) -> str:
        return await self.frame.title()

    async def query_all(self, selector: str) -> List[LiveElement]:
        handles = await self.frame.query_selector_all(selector)
        elements: List[LiveElement] = []
        for handle in handles:
            try:
                elements.append(await LiveElement.create(handle, self))
            except ElementAccessError as exc:
                logger.debug("Skipping detached element for %s: %s", selector, exc)
        return elements

    async def count(self, selector: str) -> int:
        return await self.frame.eval_on_selector_all(selector, scripts.COUNT_JS)

    async def frames(self) -> List[LiveFrame]:
        return [LiveFrame(self, child) for child in self.frame.child_frames]

    async def observe(self, callback: Callable[[], None]) -> LiveSubscription:
        if self.page is None:
            raise ArtifactSyncError("Mutation observation needs the owning page")
        if not self._binding_ready:
            await self.page.expose_binding(scripts.MUTATION_BINDING, self._on_mutation)
            self._binding_ready = True
        self._observers.append(callback)
        await self.frame.evaluate(scripts.OBSERVE_MUTATIONS_JS)
        return LiveSubscription(self, callback)

    async def unobserve(self, callback: Callable[[], None]) -> None:
        if callback in self._observers:
            self._observers.remove(callback)
        if not self._observers:
            await self.frame.evaluate(scripts.DISCONNECT_MUTATIONS_JS)

    def _on_mutation(self, source: Any) -> None:
        for callback in list(self._observers):
            callback()
