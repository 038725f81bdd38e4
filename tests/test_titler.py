"""Tests for title derivation."""

import asyncio

from artifact_sync.detection.titler import Titler
from artifact_sync.dom.soup import SoupDocument
from tests.helpers.pages import PYTHON_SNIPPET

FIXED_CLOCK = lambda: 1712345678.0  # noqa: E731


def title_of(html: str, text: str, language: str, selector: str = "pre") -> str:
    document = SoupDocument(html)

    async def run():
        element = (await document.query_all(selector))[0]
        return await Titler(clock=FIXED_CLOCK).title(element, text, language)

    return asyncio.run(run())


class TestMetadataTitles:
    """Titles from attributes and nearby headings."""

    def test_data_title_on_ancestor(self):
        html = f'<div data-title="Fibonacci Helper"><pre>{PYTHON_SNIPPET}</pre></div>'
        assert title_of(html, PYTHON_SNIPPET, "python") == "Fibonacci_Helper"

    def test_language_label_is_not_a_title(self):
        html = f'<div data-title="Python"><pre>{PYTHON_SNIPPET}</pre></div>'
        assert title_of(html, PYTHON_SNIPPET, "python") == "foo_python"

    def test_heading_sibling(self):
        html = f"<div><h3>Quick sort</h3><pre>{PYTHON_SNIPPET}</pre></div>"
        assert title_of(html, PYTHON_SNIPPET, "python") == "Quick_sort"

    def test_control_labels_ignored(self):
        html = f'<div><div class="file-title">Copy</div><pre>{PYTHON_SNIPPET}</pre></div>'
        assert title_of(html, PYTHON_SNIPPET, "python") == "foo_python"

    def test_title_that_sanitizes_to_nothing_is_skipped(self):
        html = f'<div data-title="???"><pre>{PYTHON_SNIPPET}</pre></div>'
        assert title_of(html, PYTHON_SNIPPET, "python") == "foo_python"


class TestContextTitles:
    def test_last_sentence_before_block(self):
        html = (
            '<div data-message-author-role="assistant">'
            "<p>Here is the code. Use it like this:</p>"
            f"<pre>{PYTHON_SNIPPET}</pre></div>"
        )
        assert title_of(html, PYTHON_SNIPPET, "python") == "Use_it_like_this"

    def test_no_message_container(self):
        html = f"<div><p>Use it like this:</p><pre>{PYTHON_SNIPPET}</pre></div>"
        assert title_of(html, PYTHON_SNIPPET, "python") == "foo_python"


class TestContentTitles:
    """Titles read from the artifact text itself."""

    def test_embedded_filename_first(self):
        text = "// format_date.js\nexport function formatDate(d) {\n  return d.toISOString();\n}"
        assert Titler().from_content(text, "javascript")[0] == "format_date.js"

    def test_identifier(self):
        text = "export class ArtifactStore {\n  constructor() {}\n}"
        assert Titler().from_content(text, "javascript")[0] == "ArtifactStore_javascript"

    def test_leading_comment(self):
        text = "# Compute rolling averages\nx = [1, 2, 3]\nprint(sum(x) / len(x))"
        assert Titler().from_content(text, "python") == ["Compute rolling averages"]

    def test_shebang_skipped(self):
        text = "#!/bin/sh\n# Deploy the site\nrsync -av build/ host:/srv"
        assert Titler().from_content(text, "bash") == ["Deploy the site"]


class TestFallback:
    def test_fallback_uses_language_and_clock(self):
        assert Titler(clock=FIXED_CLOCK).fallback("json") == "json_document_1712345678000"

    def test_fallback_when_nothing_else(self):
        assert title_of("<pre>{}</pre>", "{}\n{}\n{}", "json") == "json_document_1712345678000"
