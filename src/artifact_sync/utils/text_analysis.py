"""Deterministic text analysis helpers for artifact detection."""

from __future__ import annotations

import re
from typing import List, Optional, Pattern, Tuple

# Line-level signals that a block of text is source code
CODE_LINE_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(r"^\s*(?:async\s+)?(?:def|function|class|import|const|let|var|export|return)\b", re.MULTILINE),
    re.compile(r"^\s*from\s+[\w.]+\s+import\b", re.MULTILINE),
    re.compile(r"^\s*#{1,6}\s"),  # heading markers only count on the first line
    re.compile(r"#!/"),
    re.compile(r"```"),
    re.compile(r"\)\s*\{"),
    re.compile(r"\}\s*else\b"),
    re.compile(r"\b(?:if|for|while|switch)\s*\("),
    re.compile(r"module\.exports"),
    re.compile(r"=>\s*[{(\w]"),
)

_WHITESPACE_RE = re.compile(r"\s+")
_INDENTED_RE = re.compile(r"^(?: {4}|\t)\S")


def non_blank_lines(text: str) -> List[str]:
    """Return the lines of ``text`` that contain something besides whitespace."""
    return [line for line in text.splitlines() if line.strip()]


def looks_like_code(text: str) -> bool:
    """Heuristic check for source code.

    Three independent signals, any of which is enough:
    keyword/symbol indicators, brace+semicolon density, and indentation
    density.

    Args:
        text: Text to inspect

    Returns:
        True if the text reads like code
    """
    if not text:
        return False

    for pattern in CODE_LINE_PATTERNS:
        if pattern.search(text):
            return True

    lines = non_blank_lines(text)
    line_count = max(len(lines), 1)

    if "{" in text and "}" in text and ";" in text:
        symbols = text.count("{") + text.count("}") + text.count(";")
        if symbols / line_count >= 0.3:
            return True

    if len(lines) >= 4:
        indented = sum(1 for line in lines if _INDENTED_RE.match(line))
        if indented / len(lines) >= 0.3:
            return True

    return False


def normalize_for_comparison(text: str) -> str:
    """Collapse whitespace runs, trim and case-fold for duplicate checks."""
    return _WHITESPACE_RE.sub(" ", text).strip().casefold()


def similarity(first: str, second: str, window: Optional[int] = None) -> float:
    """Position-wise character match ratio.

    Args:
        first: First string (already normalized)
        second: Second string (already normalized)
        window: Compare only the first ``window`` characters when set

    Returns:
        Matches divided by the longer compared length (0.0 to 1.0)
    """
    if window is not None:
        first = first[:window]
        second = second[:window]
    if first == second:
        return 1.0
    if not first or not second:
        return 0.0
    matches = sum(1 for a, b in zip(first, second) if a == b)
    return matches / max(len(first), len(second))


__all__ = [
    "CODE_LINE_PATTERNS",
    "non_blank_lines",
    "looks_like_code",
    "normalize_for_comparison",
    "similarity",
]
