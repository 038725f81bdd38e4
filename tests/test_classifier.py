"""Tests for language classification and hint extraction."""

import asyncio
import re

from artifact_sync.detection.classifier import (
    Classifier,
    classify,
    extract_language_hint,
    hint_from_metadata,
    normalize_language_hint,
    score,
)
from artifact_sync.detection.patterns import LANGUAGE_LABELS, LanguagePattern
from artifact_sync.dom.soup import SoupDocument
from tests.helpers.pages import JS_SNIPPET, PYTHON_SNIPPET


class TestClassify:
    """Ordered, deterministic labelling."""

    def test_deterministic(self):
        assert classify(JS_SNIPPET) == classify(JS_SNIPPET)

    def test_markdown_takes_priority(self):
        assert classify("# Title\n- item\nfunction foo() {}") == "markdown"

    def test_single_markdown_signal_is_not_enough(self):
        assert classify("# Title\nfunction foo() {}") != "markdown"

    def test_javascript(self):
        assert classify(JS_SNIPPET) == "javascript"

    def test_python(self):
        assert classify(PYTHON_SNIPPET) == "python"

    def test_sql(self):
        assert classify("SELECT id, name FROM users WHERE active = 1 ORDER BY name;") == "sql"

    def test_no_match_is_text(self):
        assert classify("hello there my good friend") == "text"

    def test_ties_resolve_to_earlier_table_entry(self):
        # go and kotlin each score one hit; go comes first in the table
        assert classify("fmt.Println(a)\nprintln(b)") == "go"

    def test_custom_table_order(self):
        alpha = LanguagePattern("alpha", re.compile("x"))
        beta = LanguagePattern("beta", re.compile("y"))
        assert Classifier([alpha, beta], markdown_signatures=()).classify("xy") == "alpha"
        assert Classifier([beta, alpha], markdown_signatures=()).classify("xy") == "beta"

    def test_higher_count_beats_order(self):
        alpha = LanguagePattern("alpha", re.compile("x"))
        beta = LanguagePattern("beta", re.compile("y"))
        assert Classifier([alpha, beta], markdown_signatures=()).classify("xyy") == "beta"


class TestScore:
    def test_keys_follow_table_order(self):
        assert list(score(JS_SNIPPET)) == list(LANGUAGE_LABELS)

    def test_counts(self):
        scores = score(JS_SNIPPET)
        assert scores["javascript"] > 0
        assert scores["python"] == 0


class TestLanguageHints:
    """Explicit hints on the element or its surroundings."""

    def test_normalize_aliases_and_prefixes(self):
        assert normalize_language_hint("py") == "python"
        assert normalize_language_hint("language-js") == "javascript"
        assert normalize_language_hint("LANG-TS") == "typescript"
        assert normalize_language_hint("md") == "markdown"
        assert normalize_language_hint("rust") == "rust"

    def test_normalize_unknown(self):
        assert normalize_language_hint("klingon") is None
        assert normalize_language_hint("") is None
        assert normalize_language_hint(None) is None

    def test_hint_from_attributes(self):
        assert hint_from_metadata("", {"data-language": "py"}) == "python"

    def test_hint_from_class_skips_unknown(self):
        assert hint_from_metadata("lang-xyz language-go", {}) == "go"

    def test_extract_from_code_child(self):
        document = SoupDocument('<pre><code class="language-javascript">let a = 1;</code></pre>')

        async def run():
            pre = (await document.query_all("pre"))[0]
            return await extract_language_hint(pre)

        assert asyncio.run(run()) == "javascript"

    def test_extract_from_ancestor(self):
        document = SoupDocument('<div class="language-python"><section><pre>x = 1</pre></section></div>')

        async def run():
            pre = (await document.query_all("pre"))[0]
            return await extract_language_hint(pre)

        assert asyncio.run(run()) == "python"

    def test_no_hint(self):
        document = SoupDocument("<div><pre>x = 1</pre></div>")

        async def run():
            pre = (await document.query_all("pre"))[0]
            return await extract_language_hint(pre)

        assert asyncio.run(run()) is None
