"""Document tree protocol consumed by the detection pipeline.

The pipeline never reads ambient page state; it is handed a ``Document`` and
works through the primitives below. ``artifact_sync.dom.soup`` implements them
over a parsed HTML snapshot, ``artifact_sync.dom.live`` over a Playwright page.
"""

from __future__ import annotations

from typing import Callable, Dict, Hashable, List, Mapping, Optional, Protocol, Tuple


class Element(Protocol):
    """A node reference plus cached tag, class and attribute metadata."""

    @property
    def key(self) -> Hashable:
        """Stable identity of the underlying node within one scan."""
        ...

    @property
    def tag(self) -> str:
        ...

    @property
    def class_name(self) -> str:
        ...

    @property
    def attributes(self) -> Mapping[str, str]:
        ...

    def get_attribute(self, name: str) -> Optional[str]:
        ...

    async def parent(self) -> Optional["Element"]:
        ...

    async def previous_sibling(self) -> Optional["Element"]:
        ...

    async def query(self, selector: str) -> Optional["Element"]:
        ...

    async def query_all(self, selector: str) -> List["Element"]:
        ...

    async def text_content(self) -> str:
        ...

    async def inner_text(self) -> str:
        ...

    async def inner_html(self) -> str:
        ...

    async def value(self) -> Optional[str]:
        """Form-control value, or None for non form controls."""
        ...

    async def computed_style(self) -> Dict[str, str]:
        ...

    async def scroll_size(self) -> Tuple[int, int]:
        """Return ``(scrollHeight, clientHeight)``."""
        ...

    async def click(self) -> None:
        ...

    async def apply_styles(self, styles: Mapping[str, str]) -> Dict[str, str]:
        """Set inline styles and return the previous inline values ("" if unset)."""
        ...

    async def restore_styles(self, previous: Mapping[str, str]) -> None:
        ...

    async def scroll_to_end(self) -> None:
        ...

    async def preceding_text(self, container: "Element") -> List[str]:
        """Text nodes inside ``container`` that precede this node, in order.

        Text inside ``pre``/``code``/``script``/``style`` is skipped.
        """
        ...


class Subscription(Protocol):
    async def close(self) -> None:
        ...


class FrameRef(Protocol):
    """An embedded frame that may or may not be readable."""

    @property
    def url(self) -> Optional[str]:
        ...

    async def open(self) -> "Document":
        """Return the frame's document.

        Raises:
            CrossOriginFrameError: the frame belongs to another origin.
        """
        ...


class Document(Protocol):
    @property
    def url(self) -> Optional[str]:
        ...

    async def title(self) -> str:
        ...

    async def query_all(self, selector: str) -> List[Element]:
        ...

    async def count(self, selector: str) -> int:
        ...

    async def frames(self) -> List[FrameRef]:
        ...

    async def observe(self, callback: Callable[[], None]) -> Subscription:
        """Call ``callback`` whenever the tree's children change."""
        ...
