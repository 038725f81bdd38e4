"""Utility modules for Artifact Sync."""

from .text_analysis import (
    looks_like_code,
    non_blank_lines,
    normalize_for_comparison,
    similarity,
)

from .filesystem_safety import (
    sanitize_title,
    validate_path_traversal,
    FORBIDDEN_TITLE_CHARS,
    MAX_TITLE_LENGTH,
)

__all__ = [
    # Text analysis
    "looks_like_code",
    "non_blank_lines",
    "normalize_for_comparison",
    "similarity",
    # Filesystem safety utils
    "sanitize_title",
    "validate_path_traversal",
    "FORBIDDEN_TITLE_CHARS",
    "MAX_TITLE_LENGTH",
]
