"""Language classification over the ordered pattern table."""

from __future__ import annotations

import re
from typing import Dict, Optional, Sequence

from artifact_sync.detection.patterns import (
    CLASSIFIER_MARKDOWN_SIGNATURES,
    KNOWN_LANGUAGES,
    LANGUAGE_HINT_ALIASES,
    LANGUAGE_PATTERNS,
    MARKDOWN_MIN_SIGNATURES,
    LanguagePattern,
    Signature,
    markdown_signal_count,
)
from artifact_sync.dom.base import Element

HINT_ATTRIBUTES = ("data-language", "data-lang", "data-mode")
HINT_ANCESTOR_DEPTH = 3

_HINT_CLASS_RE = re.compile(r"(?:^|\s)(?:language|lang)-([\w+#-]+)")


class Classifier:
    def __init__(
        self,
        patterns: Sequence[LanguagePattern] = LANGUAGE_PATTERNS,
        markdown_signatures: Sequence[Signature] = CLASSIFIER_MARKDOWN_SIGNATURES,
    ):
        self.patterns = tuple(patterns)
        self.markdown_signatures = tuple(markdown_signatures)

    def is_markdown(self, text: str) -> bool:
        return markdown_signal_count(text, self.markdown_signatures) >= MARKDOWN_MIN_SIGNATURES

    def score(self, text: str) -> Dict[str, int]:
        """Match counts per language label, in table order."""
        return {entry.label: len(entry.pattern.findall(text)) for entry in self.patterns}

    def classify(self, text: str) -> str:
        if self.is_markdown(text):
            return "markdown"
        best_label = "text"
        best_score = 0
        for entry in self.patterns:
            count = len(entry.pattern.findall(text))
            # Strictly greater keeps the earlier entry on ties.
            if count > best_score:
                best_label, best_score = entry.label, count
        return best_label


def normalize_language_hint(hint: Optional[str]) -> Optional[str]:
    """Map a raw hint (``py``, ``language-js``...) to a known label."""
    if not hint:
        return None
    value = hint.strip().lower()
    for prefix in ("language-", "lang-"):
        if value.startswith(prefix):
            value = value[len(prefix):]
    value = LANGUAGE_HINT_ALIASES.get(value, value)
    return value if value in KNOWN_LANGUAGES else None


def hint_from_metadata(class_name: str, attributes: Dict[str, str]) -> Optional[str]:
    for name in HINT_ATTRIBUTES:
        label = normalize_language_hint(attributes.get(name))
        if label:
            return label
    for match in _HINT_CLASS_RE.finditer(class_name or ""):
        label = normalize_language_hint(match.group(1))
        if label:
            return label
    return None


async def extract_language_hint(element: Element, depth: int = HINT_ANCESTOR_DEPTH) -> Optional[str]:
    """Explicit language hint on the element, a code child, or a near ancestor."""
    label = hint_from_metadata(element.class_name, element.attributes)
    if label:
        return label

    code = await element.query("code")
    if code is not None:
        label = hint_from_metadata(code.class_name, code.attributes)
        if label:
            return label

    current = element
    for _ in range(depth):
        current = await current.parent()
        if current is None:
            break
        label = hint_from_metadata(current.class_name, current.attributes)
        if label:
            return label
    return None


_default = Classifier()


def classify(text: str) -> str:
    return _default.classify(text)


def score(text: str) -> Dict[str, int]:
    return _default.score(text)
