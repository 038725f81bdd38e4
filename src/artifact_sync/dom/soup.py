"""BeautifulSoup-backed document for saved pages and synthetic trees.

A parsed snapshot has no layout engine, so a few primitives are emulated:

- the inline ``style`` attribute stands in for the computed style;
- ``hidden``, ``display: none``, ``visibility: hidden`` and closed
  ``<details>`` content are left out of ``inner_text``;
- clicking a toggle flips ``aria-expanded``, un-hides its ``aria-controls``
  targets and opens ``<details>``;
- scroll metrics are always ``(0, 0)``.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Hashable, List, Mapping, Optional, Tuple
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup
from bs4.element import CData, NavigableString, PreformattedString, Tag

from artifact_sync.exceptions import CrossOriginFrameError

logger = logging.getLogger(__name__)

SKIP_TAGS = {"script", "style", "template", "noscript", "head"}
BLOCK_TAGS = {
    "address", "article", "aside", "blockquote", "dd", "div", "dl", "dt",
    "fieldset", "figcaption", "figure", "footer", "form", "h1", "h2", "h3",
    "h4", "h5", "h6", "header", "hr", "li", "main", "nav", "ol", "p", "pre",
    "section", "table", "tr", "ul",
}
CODE_CONTEXT_TAGS = {"pre", "code", "script", "style"}


def parse_style(style: str) -> Dict[str, str]:
    """Parse an inline ``style`` attribute into a property map."""
    result: Dict[str, str] = {}
    for declaration in (style or "").split(";"):
        prop, sep, value = declaration.partition(":")
        if sep and prop.strip():
            result[prop.strip().lower()] = value.strip()
    return result


def format_style(styles: Mapping[str, str]) -> str:
    return "; ".join(f"{prop}: {value}" for prop, value in styles.items())


def _is_text(node) -> bool:
    # Comments, doctypes and processing instructions are PreformattedString
    # subclasses; CDATA is the one preformatted type that carries content.
    if not isinstance(node, NavigableString):
        return False
    return not isinstance(node, PreformattedString) or isinstance(node, CData)


def _is_hidden(tag: Tag) -> bool:
    if tag.has_attr("hidden"):
        return True
    style = parse_style(tag.get("style", ""))
    return style.get("display") == "none" or style.get("visibility") == "hidden"


def _ensure_newline(parts: List[str]) -> None:
    if parts and not parts[-1].endswith("\n"):
        parts.append("\n")


def render_inner_text(root: Tag) -> str:
    """Approximate ``innerText``: visible text with block and ``<br>`` breaks."""
    parts: List[str] = []

    def walk(node, is_root: bool = False) -> None:
        if _is_text(node):
            parts.append(str(node))
            return
        if not isinstance(node, Tag):
            return
        if node.name in SKIP_TAGS:
            return
        if not is_root and _is_hidden(node):
            return
        if node.name == "br":
            parts.append("\n")
            return
        if node.name == "details" and not node.has_attr("open"):
            summary = node.find("summary", recursive=False)
            if summary is not None:
                walk(summary)
            return
        block = node.name in BLOCK_TAGS
        if block:
            _ensure_newline(parts)
        for child in node.children:
            walk(child)
        if block:
            _ensure_newline(parts)

    walk(root, is_root=True)
    return "".join(parts)


def _origin(url: str) -> Tuple[str, str, Optional[int]]:
    parsed = urlparse(url)
    return parsed.scheme, (parsed.hostname or "").lower(), parsed.port


class SoupElement:
    def __init__(self, tag: Tag, document: "SoupDocument"):
        self._tag = tag
        self._document = document

    def __repr__(self) -> str:
        return f"SoupElement(<{self.tag} class={self.class_name!r}>)"

    @property
    def key(self) -> Hashable:
        return id(self._tag)

    @property
    def tag(self) -> str:
        return self._tag.name

    @property
    def class_name(self) -> str:
        classes = self._tag.get("class", [])
        if isinstance(classes, str):
            return classes
        return " ".join(classes)

    @property
    def attributes(self) -> Dict[str, str]:
        return {
            name: " ".join(value) if isinstance(value, list) else str(value)
            for name, value in self._tag.attrs.items()
        }

    def get_attribute(self, name: str) -> Optional[str]:
        return self.attributes.get(name)

    async def parent(self) -> Optional["SoupElement"]:
        parent = self._tag.parent
        if parent is None or isinstance(parent, BeautifulSoup):
            return None
        return self._document.wrap(parent)

    async def previous_sibling(self) -> Optional["SoupElement"]:
        sibling = self._tag.find_previous_sibling()
        return self._document.wrap(sibling) if sibling is not None else None

    async def query(self, selector: str) -> Optional["SoupElement"]:
        found = self._tag.select_one(selector)
        return self._document.wrap(found) if found is not None else None

    async def query_all(self, selector: str) -> List["SoupElement"]:
        return [self._document.wrap(tag) for tag in self._tag.select(selector)]

    async def text_content(self) -> str:
        return self._tag.get_text()

    async def inner_text(self) -> str:
        return render_inner_text(self._tag)

    async def inner_html(self) -> str:
        return self._tag.decode_contents()

    async def value(self) -> Optional[str]:
        if self._tag.name == "textarea":
            return self._tag.get_text()
        if self._tag.name == "input":
            return self._tag.get("value", "")
        return None

    async def computed_style(self) -> Dict[str, str]:
        return parse_style(self._tag.get("style", ""))

    async def scroll_size(self) -> Tuple[int, int]:
        return 0, 0

    async def click(self) -> None:
        tag = self._tag
        if tag.name == "summary" and isinstance(tag.parent, Tag) and tag.parent.name == "details":
            self._toggle_details(tag.parent)
        elif tag.name == "details":
            self._toggle_details(tag)

        expanded = tag.get("aria-expanded")
        if expanded is None:
            return
        now_expanded = expanded != "true"
        tag["aria-expanded"] = "true" if now_expanded else "false"
        for target_id in tag.get("aria-controls", "").split():
            target = self._document.soup.find(id=target_id)
            if target is None:
                continue
            if now_expanded:
                _unhide(target)
            else:
                target["hidden"] = ""

    @staticmethod
    def _toggle_details(details: Tag) -> None:
        if details.has_attr("open"):
            del details["open"]
        else:
            details["open"] = ""

    async def apply_styles(self, styles: Mapping[str, str]) -> Dict[str, str]:
        current = parse_style(self._tag.get("style", ""))
        previous = {prop: current.get(prop, "") for prop in styles}
        current.update(styles)
        self._tag["style"] = format_style(current)
        return previous

    async def restore_styles(self, previous: Mapping[str, str]) -> None:
        current = parse_style(self._tag.get("style", ""))
        for prop, value in previous.items():
            if value:
                current[prop] = value
            else:
                current.pop(prop, None)
        if current:
            self._tag["style"] = format_style(current)
        elif self._tag.has_attr("style"):
            del self._tag["style"]

    async def scroll_to_end(self) -> None:
        # No layout, nothing is lazily rendered.
        return None

    async def preceding_text(self, container: "SoupElement") -> List[str]:
        container_tag = container._tag
        texts: List[str] = []
        for node in container_tag.descendants:
            if node is self._tag:
                break
            if not _is_text(node):
                continue
            if _inside(node, CODE_CONTEXT_TAGS, stop=container_tag):
                continue
            text = str(node).strip()
            if text:
                texts.append(text)
        return texts


def _inside(node, tag_names, stop: Tag) -> bool:
    for parent in node.parents:
        if parent is stop:
            return parent.name in tag_names
        if parent.name in tag_names:
            return True
    return False


def _unhide(tag: Tag) -> None:
    if tag.has_attr("hidden"):
        del tag["hidden"]
    if tag.has_attr("aria-hidden"):
        del tag["aria-hidden"]
    style = parse_style(tag.get("style", ""))
    if style.get("display") == "none":
        style.pop("display")
        if style:
            tag["style"] = format_style(style)
        else:
            del tag["style"]


class SoupSubscription:
    def __init__(self, document: "SoupDocument", callback: Callable[[], None]):
        self._document = document
        self._callback = callback

    async def close(self) -> None:
        self._document.unobserve(self._callback)


class SoupFrame:
    def __init__(self, parent: "SoupDocument", iframe: Tag):
        self._parent = parent
        self._iframe = iframe

    @property
    def url(self) -> Optional[str]:
        src = self._iframe.get("src")
        if not src:
            return None
        return urljoin(self._parent.url or "", src)

    async def open(self) -> "SoupDocument":
        srcdoc = self._iframe.get("srcdoc")
        if srcdoc is not None:
            return SoupDocument(srcdoc, url=self._parent.url, frame_loader=self._parent.frame_loader)

        url = self.url
        if not url or url.startswith("about:"):
            return SoupDocument("", url=self._parent.url, frame_loader=self._parent.frame_loader)

        parent_url = self._parent.url
        if urlparse(url).scheme in ("http", "https"):
            if not parent_url or _origin(url) != _origin(parent_url):
                raise CrossOriginFrameError(url)

        html = self._parent.frame_loader(url) if self._parent.frame_loader else None
        if html is None:
            logger.debug("No content available for same-origin frame %s", url)
            html = ""
        return SoupDocument(html, url=url, frame_loader=self._parent.frame_loader)


class SoupDocument:
    """Document over a parsed HTML snapshot.

    Args:
        html: Markup to parse.
        url: Address the snapshot was taken from, if known.
        frame_loader: Optional callable returning markup for same-origin
            frame URLs.
        parser: BeautifulSoup tree builder name.
    """

    def __init__(
        self,
        html: str,
        url: Optional[str] = None,
        frame_loader: Optional[Callable[[str], Optional[str]]] = None,
        parser: str = "html.parser",
    ):
        self.soup = BeautifulSoup(html, parser)
        self._url = url
        self.frame_loader = frame_loader
        self._parser = parser
        self._observers: List[Callable[[], None]] = []

    @property
    def url(self) -> Optional[str]:
        return self._url

    def wrap(self, tag: Tag) -> SoupElement:
        return SoupElement(tag, self)

    async def title(self) -> str:
        if self.soup.title is None:
            return ""
        return self.soup.title.get_text().strip()

    async def query_all(self, selector: str) -> List[SoupElement]:
        return [self.wrap(tag) for tag in self.soup.select(selector)]

    async def count(self, selector: str) -> int:
        return len(self.soup.select(selector))

    async def frames(self) -> List[SoupFrame]:
        return [SoupFrame(self, iframe) for iframe in self.soup.find_all("iframe")]

    async def observe(self, callback: Callable[[], None]) -> SoupSubscription:
        self._observers.append(callback)
        return SoupSubscription(self, callback)

    def unobserve(self, callback: Callable[[], None]) -> None:
        if callback in self._observers:
            self._observers.remove(callback)

    def mutate(self, change: Optional[Callable[[BeautifulSoup], None]] = None) -> None:
        """Apply ``change`` to the tree and notify observers."""
        if change is not None:
            change(self.soup)
        self._notify()

    def replace_html(self, html: str) -> None:
        """Swap in a new snapshot of the same page and notify observers."""
        self.soup = BeautifulSoup(html, self._parser)
        self._notify()

    def _notify(self) -> None:
        for callback in list(self._observers):
            callback()
