"""Derive a short descriptive title for an accepted artifact."""

from __future__ import annotations

import logging
import re
import time
from typing import Callable, List, Optional

from artifact_sync.detection.classifier import normalize_language_hint
from artifact_sync.detection.patterns import COMMENT_PATTERNS, EMBEDDED_FILENAME_RE, IDENTIFIER_PATTERNS
from artifact_sync.dom.base import Element
from artifact_sync.utils.filesystem_safety import sanitize_title
from artifact_sync.utils.text_analysis import looks_like_code

logger = logging.getLogger(__name__)

TITLE_ATTRIBUTES = ("title", "data-title", "data-name", "data-filename", "aria-label")
HEADING_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})
HEADING_SELECTOR = 'h1, h2, h3, h4, h5, h6, [class*="title"], [class*="filename"], [class*="file-name"]'
METADATA_ANCESTOR_DEPTH = 5
CONTEXT_ANCESTOR_DEPTH = 25
MAX_METADATA_LENGTH = 150
MIN_SENTENCE_LENGTH = 10
MAX_SENTENCE_LENGTH = 80
MAX_SHORT_LINE_LENGTH = 80
CONTENT_SCAN_LINES = 5

GENERIC_CONTROL_TEXT = frozenset({
    "copy", "copy code", "copied", "copied!", "code", "download", "preview", "show more",
    "show less", "expand", "collapse", "edit", "retry", "share", "open", "close", "view",
    "view code", "run", "run code", "artifact",
})

_SENTENCE_SPLIT_RE = re.compile(r"(?<=[.!?])\s+|\n+")
_MESSAGE_CLASS_RE = re.compile(r"message|conversation|chat-turn", re.IGNORECASE)


def _is_message_container(element: Element) -> bool:
    if "message" in (element.get_attribute("data-testid") or "").lower():
        return True
    if element.get_attribute("data-message-author-role") is not None:
        return True
    return bool(_MESSAGE_CLASS_RE.search(element.class_name))


def _is_heading_like(element: Element) -> bool:
    if element.tag in HEADING_TAGS:
        return True
    class_name = element.class_name.lower()
    return "title" in class_name or "filename" in class_name or "file-name" in class_name


def _plausible_label(text: Optional[str]) -> Optional[str]:
    if not text:
        return None
    stripped = " ".join(text.split())
    if not 1 <= len(stripped) <= MAX_METADATA_LENGTH:
        return None
    if stripped.lower() in GENERIC_CONTROL_TEXT:
        return None
    if normalize_language_hint(stripped) is not None:
        return None
    if looks_like_code(stripped):
        return None
    return stripped


class Titler:
    """First successful source wins: metadata, context, content, fallback.

    Every candidate goes through :func:`sanitize_title`; a candidate that
    sanitizes to nothing is skipped and the next source is tried.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock

    async def title(self, element: Element, text: str, language: str) -> str:
        for source in (self.from_metadata, self.from_context):
            for candidate in await source(element):
                title = sanitize_title(candidate)
                if title:
                    return title

        for candidate in self.from_content(text, language):
            title = sanitize_title(candidate)
            if title:
                return title

        return self.fallback(language)

    async def from_metadata(self, element: Element) -> List[str]:
        candidates: List[str] = []
        current: Optional[Element] = element
        for _ in range(METADATA_ANCESTOR_DEPTH + 1):
            if current is None:
                break
            for name in TITLE_ATTRIBUTES:
                label = _plausible_label(current.get_attribute(name))
                if label:
                    candidates.append(label)
            current = await current.parent()

        heading = await element.query(HEADING_SELECTOR)
        if heading is not None:
            label = _plausible_label(await heading.text_content())
            if label:
                candidates.append(label)

        sibling = await element.previous_sibling()
        if sibling is not None and _is_heading_like(sibling):
            label = _plausible_label(await sibling.text_content())
            if label:
                candidates.append(label)

        parent = await element.parent()
        if parent is not None:
            heading = await parent.query(HEADING_SELECTOR)
            if heading is not None and heading.key != element.key:
                label = _plausible_label(await heading.text_content())
                if label:
                    candidates.append(label)
        return candidates

    async def from_context(self, element: Element) -> List[str]:
        container: Optional[Element] = await element.parent()
        for _ in range(CONTEXT_ANCESTOR_DEPTH):
            if container is None or _is_message_container(container):
                break
            container = await container.parent()
        if container is None:
            return []

        sentences: List[str] = []
        for text in await element.preceding_text(container):
            sentences.extend(part.strip() for part in _SENTENCE_SPLIT_RE.split(text) if part.strip())

        for sentence in reversed(sentences):
            if MIN_SENTENCE_LENGTH <= len(sentence) <= MAX_SENTENCE_LENGTH and not looks_like_code(sentence):
                return [sentence.rstrip(":").strip()]
        return []

    def from_content(self, text: str, language: str) -> List[str]:
        candidates: List[str] = []
        match = EMBEDDED_FILENAME_RE.search(text)
        if match:
            candidates.append(match.group(1))

        for pattern in IDENTIFIER_PATTERNS:
            match = pattern.search(text)
            if match:
                candidates.append(f"{match.group(1)}_{language}")
                break

        for raw_line in text.splitlines()[:CONTENT_SCAN_LINES]:
            line = raw_line.strip()
            if not line:
                continue
            comment = self._comment_text(line)
            if comment is not None:
                if len(comment) < MAX_SHORT_LINE_LENGTH:
                    candidates.append(comment)
                    break
                continue
            if (
                len(line) < MAX_SHORT_LINE_LENGTH
                and "{" not in line
                and ";" not in line
                and not looks_like_code(line)
            ):
                candidates.append(line)
                break
        return candidates

    @staticmethod
    def _comment_text(line: str) -> Optional[str]:
        if line.startswith("#!"):
            return None
        for _name, pattern in COMMENT_PATTERNS:
            match = pattern.match(line)
            if match and match.group(1):
                return match.group(1)
        return None

    def fallback(self, language: str) -> str:
        millis = int(self._clock() * 1000)
        return sanitize_title(f"{language}_document_{millis}")
