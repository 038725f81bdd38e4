"""Accept/reject raw candidate text with ordered content-shape rules."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from artifact_sync.detection.patterns import (
    BARE_FILENAME_RE,
    CSS_LINE_SHAPES,
    UI_SIGNATURES,
    Signature,
    looks_like_markdown,
)
from artifact_sync.utils.text_analysis import looks_like_code, non_blank_lines

logger = logging.getLogger(__name__)

MIN_CONTENT_LENGTH = 50
CSS_RATIO_THRESHOLD = 0.7
BARE_FILENAME_MAX_LENGTH = 100
LONG_TEXT_LENGTH = 200
LONG_TEXT_MIN_LINES = 3


@dataclass(frozen=True)
class ValidationResult:
    accepted: bool
    reason: str

    def __bool__(self) -> bool:
        return self.accepted


def css_ratio(text: str) -> float:
    """Fraction of non-blank lines that have a CSS shape."""
    lines = non_blank_lines(text)
    if not lines:
        return 0.0
    css_lines = sum(1 for line in lines if any(shape.matches(line) for shape in CSS_LINE_SHAPES))
    return css_lines / len(lines)


def matching_ui_signature(text: str, signatures: Sequence[Signature] = UI_SIGNATURES) -> Optional[str]:
    for signature in signatures:
        if signature.matches(text):
            return signature.name
    return None


class Validator:
    """Ordered rule list; the first rule that decides wins.

    1. too short
    2. UI chrome
    3. CSS dominant
    4. bare filename
    5. positive signal (code, markdown, long text) or reject
    """

    def __init__(
        self,
        min_length: int = MIN_CONTENT_LENGTH,
        css_threshold: float = CSS_RATIO_THRESHOLD,
        ui_signatures: Sequence[Signature] = UI_SIGNATURES,
    ):
        self.min_length = min_length
        self.css_threshold = css_threshold
        self.ui_signatures = tuple(ui_signatures)

    def validate(self, text: str) -> ValidationResult:
        trimmed = (text or "").strip()
        if len(trimmed) < self.min_length:
            return ValidationResult(False, "too_short")

        chrome = matching_ui_signature(trimmed, self.ui_signatures)
        if chrome is not None:
            return ValidationResult(False, f"ui_chrome:{chrome}")

        if css_ratio(trimmed) > self.css_threshold:
            return ValidationResult(False, "css_dominant")

        if "\n" not in trimmed and len(trimmed) < BARE_FILENAME_MAX_LENGTH and BARE_FILENAME_RE.search(trimmed):
            return ValidationResult(False, "bare_filename")

        if looks_like_code(trimmed):
            return ValidationResult(True, "code")
        if looks_like_markdown(trimmed):
            return ValidationResult(True, "markdown")
        if len(trimmed) > LONG_TEXT_LENGTH and len(trimmed.splitlines()) > LONG_TEXT_MIN_LINES:
            return ValidationResult(True, "long_text")
        return ValidationResult(False, "no_signal")

    def is_valid(self, text: str) -> bool:
        return self.validate(text).accepted


_default = Validator()


def validate(text: str) -> ValidationResult:
    return _default.validate(text)


def is_valid(text: str) -> bool:
    return _default.is_valid(text)
