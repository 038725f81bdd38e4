"""Tests for filesystem safety utilities."""

import pytest
from pathlib import Path
import tempfile
from artifact_sync.utils.filesystem_safety import (
    MAX_TITLE_LENGTH,
    sanitize_title,
    validate_path_traversal,
)


@pytest.fixture
def temp_workspace():
    with tempfile.TemporaryDirectory() as tmpdir:
        workspace = Path(tmpdir)
        yield workspace


def test_validate_path_traversal_safe(temp_workspace):
    is_valid, error, resolved = validate_path_traversal(
        temp_workspace, "safe/file.txt"
    )
    assert is_valid is True
    assert error is None
    assert resolved is not None


def test_validate_path_traversal_escape_dotdot(temp_workspace):
    is_valid, error, resolved = validate_path_traversal(
        temp_workspace, "../../../etc/passwd"
    )
    assert is_valid is False
    assert "Path traversal detected" in error
    assert resolved is None


def test_validate_path_traversal_absolute_outside(temp_workspace):
    is_valid, _error, _resolved = validate_path_traversal(temp_workspace, "/etc/passwd")
    assert is_valid is False


def test_sanitize_forbidden_characters():
    assert sanitize_title('my: "file"/name?') == "my_file_name"


def test_sanitize_whitespace_and_underscores():
    assert sanitize_title("  Quick   sort__helper ") == "Quick_sort_helper"


def test_sanitize_empty_results():
    assert sanitize_title("") == ""
    assert sanitize_title("???") == ""


def test_sanitize_caps_length():
    result = sanitize_title("word " * 40)
    assert len(result) <= MAX_TITLE_LENGTH
    assert not result.endswith("_")
