"""Tests for text analysis utilities."""

import pytest
from artifact_sync.utils.text_analysis import (
    looks_like_code,
    non_blank_lines,
    normalize_for_comparison,
    similarity,
)


class TestLooksLikeCode:
    """Tests for looks_like_code function."""

    def test_empty_text(self):
        """Empty text is never code."""
        assert looks_like_code("") is False

    @pytest.mark.parametrize("text", [
        "def main():\n    pass",
        "from os import path",
        "const x = 1",
        "if (ready) go()",
        "items.map(item => item.id)",
        "#!/usr/bin/env python",
    ])
    def test_keyword_indicators(self, text):
        assert looks_like_code(text) is True

    def test_brace_and_semicolon_density(self):
        assert looks_like_code("a { b; }\nc { d; }") is True

    def test_indentation_density(self):
        text = "steps\n    one\n    two\n    three"
        assert looks_like_code(text) is True

    def test_prose(self):
        assert looks_like_code("Just a normal sentence about the weather today.") is False


class TestComparison:
    """Tests for normalization and similarity."""

    def test_normalize(self):
        assert normalize_for_comparison("  Hello\n\tWORLD  ") == "hello world"

    def test_non_blank_lines(self):
        assert non_blank_lines("a\n\n  \nb") == ["a", "b"]

    def test_identical(self):
        assert similarity("abc", "abc") == 1.0

    def test_empty_side(self):
        assert similarity("", "abc") == 0.0

    def test_position_wise_ratio(self):
        assert similarity("abcd", "abxd") == 0.75
        assert similarity("ab", "abcd") == 0.5

    def test_window(self):
        assert similarity("abcdef", "abcxyz", window=3) == 1.0
