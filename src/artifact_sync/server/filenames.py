"""Filename derivation and collision-safe file creation for saved artifacts."""

from __future__ import annotations

import logging
import re
import time
from pathlib import Path
from typing import Callable, Iterator, Optional, Tuple

from artifact_sync.exceptions import PersistenceError
from artifact_sync.utils.filesystem_safety import validate_path_traversal

logger = logging.getLogger(__name__)

EXTENSIONS = {
    "javascript": ".js",
    "typescript": ".ts",
    "python": ".py",
    "html": ".html",
    "css": ".css",
    "jsx": ".jsx",
    "java": ".java",
    "sql": ".sql",
    "json": ".json",
    "xml": ".xml",
    "yaml": ".yml",
    "markdown": ".md",
    "bash": ".sh",
    "powershell": ".ps1",
    "php": ".php",
    "ruby": ".rb",
    "go": ".go",
    "rust": ".rs",
    "cpp": ".cpp",
    "c": ".c",
    "scss": ".scss",
    "swift": ".swift",
    "kotlin": ".kt",
    "scala": ".scala",
    "dockerfile": ".dockerfile",
    "nginx": ".conf",
    "apache": ".conf",
}
DEFAULT_EXTENSION = ".txt"
MAX_STEM_LENGTH = 50
MIN_STEM_LENGTH = 3
NUMBERED_ATTEMPTS = 5
MAX_ATTEMPTS = 10

_UNSAFE_RE = re.compile(r"[^A-Za-z0-9_-]")
_UNDERSCORES_RE = re.compile(r"__+")
_GENERIC_PREFIX_RE = re.compile(r"^(?:text|document|artifact|code)_+", re.IGNORECASE)
_TRAILING_TIMESTAMP_RE = re.compile(r"_+\d{13}_*$")


def file_extension(language: Optional[str]) -> str:
    return EXTENSIONS.get((language or "").lower(), DEFAULT_EXTENSION)


def filename_stem(title: Optional[str], language: Optional[str]) -> str:
    """Reduce a title to a short, portable file stem.

    Examples:
        >>> filename_stem("My Component", "jsx")
        'My_Component'
        >>> filename_stem("python_document_1712345678901", "python")
        'python_document'
    """
    stem = _UNSAFE_RE.sub("_", title or "")
    stem = _UNDERSCORES_RE.sub("_", stem)
    stem = _GENERIC_PREFIX_RE.sub("", stem)
    stem = _TRAILING_TIMESTAMP_RE.sub("", stem)
    stem = stem.strip("_")[:MAX_STEM_LENGTH]
    if len(stem) < MIN_STEM_LENGTH:
        stem = f"{language or 'text'}_document"
    return stem


def candidate_names(stem: str, extension: str, clock: Callable[[], float] = time.time) -> Iterator[str]:
    """``stem.ext``, then ``stem_1.ext`` .. ``stem_5.ext``, then timestamped names."""
    yield f"{stem}{extension}"
    for counter in range(1, NUMBERED_ATTEMPTS + 1):
        yield f"{stem}_{counter}{extension}"
    last = -1
    while True:
        # each timestamped name is unique even when the clock has not moved
        last = max(int(clock() * 1000), last + 1)
        yield f"{stem}_{last}{extension}"


def write_unique(
    directory: Path,
    stem: str,
    extension: str,
    content: str,
    clock: Callable[[], float] = time.time,
) -> Tuple[str, Path]:
    """Create a new file for ``content`` without ever replacing an existing one.

    Raises:
        PersistenceError: every attempted name was taken (status 409) or the
            name escaped ``directory`` (status 400).
    """
    names = candidate_names(stem, extension, clock)
    for _attempt in range(MAX_ATTEMPTS):
        filename = next(names)
        is_valid, error, path = validate_path_traversal(directory, filename)
        if not is_valid:
            raise PersistenceError(error or "Invalid filename", 400)
        try:
            # "x" fails if the file exists, so a concurrent writer is never overwritten.
            with open(path, "x", encoding="utf-8") as handle:
                handle.write(content)
        except FileExistsError:
            logger.debug("%s exists, trying next name", filename)
            continue
        return filename, path
    raise PersistenceError("Could not allocate a unique filename", 409)
