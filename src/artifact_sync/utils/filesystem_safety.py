"""Filesystem safety utilities for Artifact Sync.

Provides title sanitization for filesystem-safe names and path traversal
validation for the persistence service.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Optional, Tuple

MAX_TITLE_LENGTH = 80

# Characters that are unsafe in filenames on at least one major platform
FORBIDDEN_TITLE_CHARS = '<>:"/\\|?*'
_FORBIDDEN_RE = re.compile(r'[<>:"/\\|?*\x00-\x1f\x7f]')
_WHITESPACE_RE = re.compile(r"\s+")
_UNDERSCORES_RE = re.compile(r"_+")


def sanitize_title(title: str, max_length: int = MAX_TITLE_LENGTH) -> str:
    """Make a title filesystem-safe.

    Forbidden characters become ``_``, whitespace runs become ``_``, repeated
    underscores collapse, leading/trailing underscores are trimmed and the
    result is capped at ``max_length``.

    Args:
        title: Raw title text.
        max_length: Maximum length of the result.

    Returns:
        Sanitized title; empty string if nothing usable remains.

    Examples:
        >>> sanitize_title('my: "file"/name?')
        'my_file_name'
    """
    if not title:
        return ""
    cleaned = _FORBIDDEN_RE.sub("_", title)
    cleaned = _WHITESPACE_RE.sub("_", cleaned)
    cleaned = _UNDERSCORES_RE.sub("_", cleaned).strip("_")
    return cleaned[:max_length].rstrip("_")


def validate_path_traversal(
    workspace_root: Path,
    target_path: str
) -> Tuple[bool, Optional[str], Optional[Path]]:
    """Validate that a target path does not escape the workspace root.

    Args:
        workspace_root: Base directory (the project path).
        target_path: Target path to validate (can be relative or absolute).

    Returns:
        Tuple of (is_valid, error_message, resolved_path):
        - is_valid: True if path is safe, False otherwise.
        - error_message: Human-readable error message if invalid, None if valid.
        - resolved_path: Resolved Path object if valid, None if invalid.

    Examples:
        >>> root = Path("/workspace")
        >>> is_valid, err, path = validate_path_traversal(root, "../../../etc/passwd")
        >>> if not is_valid:
        ...     print(err)  # Path traversal detected: ... escapes workspace
    """
    try:
        base = workspace_root.resolve()
        candidate = (base / target_path).resolve()
        # This raises ValueError if candidate is not within base
        candidate.relative_to(base)
        return True, None, candidate
    except ValueError:
        return False, f"Path traversal detected: {target_path} escapes workspace", None
    except OSError as e:
        return False, f"Invalid path: {str(e)}", None


__all__ = [
    "MAX_TITLE_LENGTH",
    "FORBIDDEN_TITLE_CHARS",
    "sanitize_title",
    "validate_path_traversal",
]
