"""Heuristic tables for detection.

Every table here is ordered data: the Classifier, Validator and Titler are
table-driven evaluators over these entries. Table order is significant where
noted (classifier ties go to the earlier entry).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Pattern, Sequence, Tuple

_M = re.MULTILINE


@dataclass(frozen=True)
class LanguagePattern:
    label: str
    pattern: Pattern[str]


@dataclass(frozen=True)
class Signature:
    """Named check that matches either a regex or a predicate."""

    name: str
    pattern: Optional[Pattern[str]] = None
    predicate: Optional[Callable[[str], bool]] = None

    def matches(self, text: str) -> bool:
        if self.pattern is not None and self.pattern.search(text):
            return True
        if self.predicate is not None and self.predicate(text):
            return True
        return False


def _lang(label: str, pattern: str, flags: int = _M) -> LanguagePattern:
    return LanguagePattern(label, re.compile(pattern, flags))


# Ordered: ties resolve to the earlier entry.
LANGUAGE_PATTERNS: Tuple[LanguagePattern, ...] = (
    _lang("javascript",
          r"\bfunction\s*\w*\s*\(|\b(?:const|let|var)\s+\w+\s*=|=>|\bconsole\.\w+\(|\bdocument\.\w+"
          r"|\bwindow\.\w+|\brequire\(['\"]|\bmodule\.exports\b|\bexport\s+default\b|\.then\("),
    _lang("typescript",
          r"\binterface\s+\w+\s*(?:<[^>\n]*>)?\s*\{|\btype\s+\w+\s*=|:\s*(?:string|number|boolean|void|unknown|never)\b"
          r"|\bas\s+(?:string|number|const|unknown)\b|\b(?:private|protected|readonly)\s+\w+\s*:"
          r"|\benum\s+\w+\s*\{|\bimplements\s+\w+"),
    _lang("jsx",
          r"\bimport\s+React\b|(?:^|[\s(])<[A-Z]\w*(?:\s+\w+=|\s*/?>)|\bclassName=|\bJSX\.Element\b"
          r"|\buse(?:State|Effect|Ref|Memo|Callback|Context)\(|\breturn\s*\(\s*$"),
    _lang("html",
          r"<!DOCTYPE\s+html|</?(?:html|head|body|title|meta|link)\b|\bclass\s*=\s*[\"']|\bhref\s*=\s*[\"']"
          r"|<(?:div|span|p|section|ul|li|table|form|button)\b[^>{]*>",
          _M | re.IGNORECASE),
    _lang("css",
          r"^\s*(?!(?:if|else|for|while|switch|struct|impl|enum|class|interface|fn|func|type|trait|match|do|try"
          r"|catch|loop|union|namespace|mod|object|server|location|http|events|upstream)\b)[.#]?[\w-][^{};\n()=]*\{\s*$"
          r"|^\s*[\w-]+\s*:\s*[^;{}\n]+;\s*$|@media\b|@import\b|@keyframes\b|@font-face\b"),
    _lang("scss",
          r"^\s*\$[\w-]+\s*:|@mixin\b|@include\b|@extend\b|@use\s+['\"]|&:[\w-]+|&\.[\w-]+|#\{\$"),
    _lang("python",
          r"^\s*(?:async\s+)?def\s+\w+\s*\(|^\s*class\s+\w+(?:\([^)\n]*\))?\s*:"
          r"|^\s*(?:from\s+[\w.]+\s+)?import\s+[\w.]+(?:\s+as\s+\w+)?\s*$|\bprint\(|\bif\s+__name__\s*=="
          r"|\bself\.\w+|^\s*elif\b|^\s*pass\s*$|^\s*(?:try|finally):\s*$|^\s*except\b"
          r"|^\s*with\s+.+\s+as\s+\w+\s*:"),
    _lang("java",
          r"\bpublic\s+(?:static\s+)?(?:final\s+)?(?:class|interface|void|enum)\b"
          r"|\b(?:private|protected|public)\s+(?:static\s+)?(?:final\s+)?[\w<>\[\]]+\s+\w+\s*[;=(]"
          r"|\bSystem\.out\.print|\bstatic\s+void\s+main\b|^\s*import\s+java\.|^\s*package\s+[\w.]+;|@Override\b"),
    _lang("cpp",
          r"#include\s*<(?:iostream|vector|string|map|memory|algorithm|utility|set|unordered_map)>"
          r"|\busing\s+namespace\s+std\b|\bstd::\w+|\bcout\s*<<|\bcin\s*>>|\btemplate\s*<|\bnullptr\b"
          r"|\bvirtual\b|\bauto\s+\w+\s*="),
    _lang("c",
          r"#include\s*<\w+\.h>|\bprintf\s*\(|\bscanf\s*\(|\bmalloc\s*\(|\bfree\s*\(|\bint\s+main\s*\("
          r"|\bsizeof\s*\(|\bstruct\s+\w+\s*\*|#define\s+\w+|\bNULL\b"),
    _lang("php",
          r"<\?php|\$\w+\s*=(?!=)|\$this->|->\w+\(|\becho\s+[\"'$]|\bfunction\s+\w+\s*\(\s*\$"
          r"|\bnamespace\s+[\w\\]+;|\buse\s+[\w\\]+;|\barray\(|=>\s*\$"),
    _lang("ruby",
          r"^\s*def\s+\w+[?!]?\s*$|^\s*end\s*$|\bputs\s+|\brequire\s+['\"]|\battr_(?:accessor|reader|writer)\b"
          r"|\bdo\s*\|[^|\n]*\||\.each\s+do\b|@\w+\s*=|:\w+\s*=>|\bnil\b|\belsif\b"),
    _lang("go",
          r"^\s*package\s+\w+\s*$|\bfunc\s+(?:\([^)\n]*\)\s*)?\w+\s*\(|^\s*import\s+\(|\bfmt\.\w+|:="
          r"|\bgo\s+func\b|\bchan\s+\w+|\bdefer\s+|\berr\s*!=\s*nil"),
    _lang("rust",
          r"\bfn\s+\w+\s*(?:<[^>\n]*>)?\s*\(|\blet\s+mut\b|\bimpl(?:<[^>\n]*>)?\s+\w+"
          r"|\bpub\s+(?:fn|struct|enum|mod|trait|use)\b|\buse\s+\w+::|\bprintln!\(|\bmatch\s+\w+\s*\{|&mut\s"
          r"|->\s*(?:Self|Result|Option|Vec|String|bool|i32|u32|usize)\b|\bSome\("),
    _lang("swift",
          r"\bfunc\s+\w+\s*(?:<[^>\n]*>)?\s*\([^)\n]*\)\s*(?:->|\{)|\bimport\s+(?:UIKit|SwiftUI|Foundation)\b"
          r"|\bguard\s+let\b|\bif\s+let\b|\bvar\s+\w+\s*:\s*[A-Z]\w*|\blet\s+\w+\s*:\s*[A-Z]\w*"
          r"|@(?:State|Published|IBOutlet|IBAction|objc)\b|\bstruct\s+\w+\s*:\s*View\b|\boverride\s+func\b"),
    _lang("kotlin",
          r"\bfun\s+\w+\s*\(|\bval\s+\w+\s*(?::\s*\w+\??)?\s*=|\bdata\s+class\b|\bcompanion\s+object\b"
          r"|\bwhen\s*\([^)\n]*\)\s*\{|\bprintln\(|:\s*(?:String|Int|Boolean|Unit)\??\s*[=,){]"
          r"|\blateinit\s+var\b|\bsuspend\s+fun\b"),
    _lang("scala",
          r"\bobject\s+\w+\s*(?:extends\b|\{)|\bcase\s+class\b|\bdef\s+\w+\s*(?:\[[^\]\n]*\])?\s*\([^)\n]*:\s*[A-Z]\w*"
          r"|\bval\s+\w+\s*:\s*[A-Z]|\bextends\s+App\b|\bimplicit\s+|\btrait\s+\w+|\bsealed\s+trait\b"),
    _lang("sql",
          r"\bSELECT\b|\bFROM\s+\w+|\bWHERE\b|\bVALUES\s*\(|\bUPDATE\s+\w+\s+SET\b|\bDELETE\s+FROM\b"
          r"|(?i:\bcreate\s+(?:table|index|view|database)\b|\binsert\s+into\b|\balter\s+table\b|\bdrop\s+table\b"
          r"|\bprimary\s+key\b|\bgroup\s+by\b|\border\s+by\b|\b(?:inner|left|right|outer)\s+join\b)"),
    _lang("json",
          r"^\s*\"[^\"\n]+\"\s*:\s*(?:\"|-?\d|true\b|false\b|null\b|\[|\{)"),
    _lang("xml",
          r"<\?xml\b|\bxmlns(?::\w+)?\s*=|<!\[CDATA\[|</?[\w-]+:[\w-]+[\s>/]"),
    _lang("yaml",
          r"^[\w-]+:\s*$|^[\w-]+:\s+[^\s{}\[;][^;{}\n]*$|^\s+-\s+[\w\"']|^---\s*$"),
    _lang("bash",
          r"^#!/bin/(?:ba|z)?sh\b|^#!/usr/bin/env\s+(?:ba|z)?sh\b"
          r"|\$\((?:git|cat|date|pwd|which|dirname|basename|ls|find|whoami|uname|nproc)\b"
          r"|^\s*(?:sudo\s+)?(?:grep|sed|awk|curl|wget|chmod|chown|mkdir|apt-get|apt|brew|npm|pip|cd|source)\s+[-\w./$\"'~]"
          r"|^\s*(?:fi|done|esac)\s*$|^\s*if\s+\[|\|\s*(?:grep|xargs|sort|head|tail|wc)\b"),
    _lang("powershell",
          r"\b(?:Get|Set|New|Remove|Add|Write|Start|Stop|Import|Invoke|Test|Out|Select|Where|ForEach)-[A-Z]\w+"
          r"|\$(?:env:\w+|PSScriptRoot|true|false|null|_)\b|\s-(?:eq|ne|gt|lt|ge|le|like|match)\s"
          r"|\[(?:string|int|bool|switch)\]\$|\bparam\s*\("),
    _lang("dockerfile",
          r"^\s*(?:FROM|RUN|COPY|CMD|ENTRYPOINT|WORKDIR|EXPOSE|ENV|ARG|ADD|USER|VOLUME|LABEL|HEALTHCHECK)\s+\S"),
    _lang("nginx",
          r"^\s*(?:server|location|upstream|http|events)\s*(?:[^\s{]+\s*)?\{"
          r"|\b(?:proxy_pass|listen|server_name|worker_processes|proxy_set_header|try_files|ssl_certificate)\s+[^;\n]+;"),
    _lang("apache",
          r"</?VirtualHost\b|\bDocumentRoot\s|</?Directory\b|\bServerName\s|\bServerAlias\s|\bRewriteEngine\s"
          r"|\bRewriteRule\s|\bAllowOverride\s|\bErrorLog\s|<IfModule\b"),
)

LANGUAGE_LABELS: Tuple[str, ...] = tuple(entry.label for entry in LANGUAGE_PATTERNS)
KNOWN_LANGUAGES = frozenset(LANGUAGE_LABELS) | {"markdown", "text"}

# Markdown signatures. The Validator counts every entry; the Classifier
# leaves out italic and link, which also fire on ordinary code.
MARKDOWN_SIGNATURES: Tuple[Signature, ...] = (
    Signature("header", re.compile(r"^#{1,6}\s+\S", _M)),
    Signature("bullet_list", re.compile(r"^(?:[-+*]|\s{2,}[-+*])\s+\S", _M)),  # " * " is a doc comment
    Signature("ordered_list", re.compile(r"^\s*\d+\.\s+\S", _M)),
    Signature("bold", re.compile(r"\*\*[^*\n]+\*\*")),
    Signature("italic", re.compile(r"(?<![*\w])[*_][^*_\n]+[*_](?![*\w])")),
    Signature("link", re.compile(r"\[[^\]\n]+\]\([^)\n]+\)")),
    Signature("inline_code", re.compile(r"(?<!`)`[^`\n]+`(?!`)")),
    Signature("code_fence", re.compile(r"^\s*```", _M)),
    Signature("blockquote", re.compile(r"^>\s?\S", _M)),
    Signature("table", re.compile(r"^\|.*\|\s*$", _M)),
    Signature("rule", re.compile(r"^(?:-{3,}|\*{3,}|_{3,})\s*$", _M)),
)
CLASSIFIER_MARKDOWN_SIGNATURES: Tuple[Signature, ...] = tuple(
    signature for signature in MARKDOWN_SIGNATURES if signature.name not in ("italic", "link")
)
MARKDOWN_MIN_SIGNATURES = 2


def markdown_signal_count(text: str, signatures: Sequence[Signature] = MARKDOWN_SIGNATURES) -> int:
    """Count how many distinct markdown constructs appear in ``text``."""
    return sum(1 for signature in signatures if signature.matches(text))


def looks_like_markdown(text: str, signatures: Sequence[Signature] = MARKDOWN_SIGNATURES) -> bool:
    if not text or len(text) < 10:
        return False
    return markdown_signal_count(text, signatures) >= MARKDOWN_MIN_SIGNATURES


LANGUAGE_HINT_ALIASES: Dict[str, str] = {
    "js": "javascript",
    "mjs": "javascript",
    "cjs": "javascript",
    "node": "javascript",
    "ts": "typescript",
    "tsx": "jsx",
    "react": "jsx",
    "htm": "html",
    "xhtml": "html",
    "sass": "scss",
    "py": "python",
    "python3": "python",
    "py3": "python",
    "c++": "cpp",
    "cxx": "cpp",
    "cc": "cpp",
    "hpp": "cpp",
    "h": "c",
    "rb": "ruby",
    "golang": "go",
    "rs": "rust",
    "kt": "kotlin",
    "kts": "kotlin",
    "sc": "scala",
    "mysql": "sql",
    "postgresql": "sql",
    "postgres": "sql",
    "sqlite": "sql",
    "plsql": "sql",
    "jsonc": "json",
    "json5": "json",
    "svg": "xml",
    "yml": "yaml",
    "sh": "bash",
    "shell": "bash",
    "zsh": "bash",
    "console": "bash",
    "shellscript": "bash",
    "ps1": "powershell",
    "pwsh": "powershell",
    "ps": "powershell",
    "docker": "dockerfile",
    "apacheconf": "apache",
    "htaccess": "apache",
    "md": "markdown",
    "mdx": "markdown",
    "plaintext": "text",
    "txt": "text",
    "plain": "text",
}


# ---------------------------------------------------------------------------
# UI chrome signatures (Validator rule 2)
# ---------------------------------------------------------------------------

_RELATIVE_TIME_RE = re.compile(
    r"^(?:(?:edited|updated|last\s+(?:edited|message|updated))\s+)?"
    r"(?:just\s+now|yesterday|today|an?\s+\w+\s+ago|\d+\s*(?:s|m|h|d|w|mo|y|sec|secs|seconds?|min|mins|minutes?"
    r"|hours?|hrs?|days?|weeks?|months?|years?)\s+ago)$",
    re.IGNORECASE,
)
_PRESENCE_RE = re.compile(
    r"^(?:online|offline|away|busy|idle|active(?:\s+now)?|last\s+seen\b.*|typing(?:\.\.\.|\u2026)?"
    r"|is\s+typing(?:\.\.\.|\u2026)?|do\s+not\s+disturb)$",
    re.IGNORECASE,
)
_CHROME_WORDS = frozenset({
    "copy", "copied", "code", "retry", "edit", "share", "download", "preview", "publish", "close",
    "open", "more", "less", "show", "hide", "expand", "collapse", "view", "run", "regenerate",
    "like", "dislike", "report", "new", "chat", "menu", "settings", "help", "upgrade", "plan",
    "feedback", "cancel", "save", "delete", "rename", "star", "unstar", "pin", "unpin",
})
_PRODUCT_NAME_RE = re.compile(
    r"^(?:(?:claude|anthropic|chatgpt|gpt-?[\w.]+|gemini|copilot)(?:\s+(?:ai|pro|max|team|free|plus"
    r"|opus|sonnet|haiku|[\d.]+))*[\s,|\u00b7\u2022-]*)+$",
    re.IGNORECASE,
)


def _majority_lines(pattern: Pattern[str]) -> Callable[[str], bool]:
    def check(text: str) -> bool:
        lines = [line.strip() for line in text.splitlines() if line.strip()]
        if not lines:
            return False
        hits = sum(1 for line in lines if pattern.match(line))
        return hits / len(lines) > 0.5
    return check


def _is_product_name(text: str) -> bool:
    stripped = text.strip()
    return len(stripped) <= 80 and _PRODUCT_NAME_RE.match(stripped) is not None


def _only_chrome_words(text: str) -> bool:
    words = re.findall(r"[A-Za-z]+", text)
    return bool(words) and all(word.lower() in _CHROME_WORDS for word in words)


UI_SIGNATURES: Tuple[Signature, ...] = (
    Signature("navigation", re.compile(r"^\s*New\s*chat\s*Chats\s*Projects", re.IGNORECASE)),
    Signature("navigation", re.compile(r"\bChats\s*Projects\s*(?:Artifacts\s*)?(?:Starred\s*)?Recents\b")),
    Signature("auth_prompt", re.compile(
        r"Sign\s+up\s+to\s+Claude|Continue\s+with\s+(?:Google|email|Apple|SSO)|Log\s+in\s+to\s+continue"
        r"|By\s+continuing,\s+you\s+agree\s+to",
        re.IGNORECASE,
    )),
    Signature("product_name", predicate=_is_product_name),
    Signature("relative_time", predicate=_majority_lines(_RELATIVE_TIME_RE)),
    Signature("presence", predicate=_majority_lines(_PRESENCE_RE)),
    Signature("button_strip", predicate=_only_chrome_words),
)


# ---------------------------------------------------------------------------
# CSS line shapes (Validator rule 3)
# ---------------------------------------------------------------------------

_CODE_KEYWORDS = frozenset({
    "if", "else", "for", "while", "switch", "struct", "impl", "enum", "class", "interface", "fn",
    "func", "function", "type", "trait", "match", "do", "try", "catch", "loop", "union", "namespace",
    "mod", "object", "def", "return", "const", "let", "var", "public", "private", "protected",
    "static", "export", "import", "package", "module", "new", "async", "await", "case", "default",
})
_TS_TYPE_VALUE_RE = re.compile(
    r"^(?:string|number|boolean|any|unknown|void|never|null|undefined|object|bigint|symbol)(?:\[\])?$"
)
_DECLARATION_RE = re.compile(r"^\s*(-?[a-zA-Z][\w-]*)\s*:\s*([^;{}]+?)\s*;\s*$")
_BARE_DECLARATION_RE = re.compile(r"^\s*-?[a-zA-Z][\w-]*\s*:\s*[^:{};]+$")
_RULE_SEGMENT_RE = re.compile(r"([^{}]+)\{([^{}]*)\}")
_PSEUDO_CALL_RE = re.compile(r":[-\w]+\([^)]*\)")
_ATTRIBUTE_SELECTOR_RE = re.compile(r"\[[^\]]*\]")
_AT_RULE_RE = re.compile(
    r"^\s*@(?:media|import|font-face|keyframes|-webkit-keyframes|supports|charset|layer|container"
    r"|page|namespace|tailwind|apply|property\s+--)\b"
)


def _is_selector_head(head: str) -> bool:
    head = head.strip()
    if not head or ";" in head:
        return False
    first = re.split(r"[\s.#\[:>+~,(]", head, maxsplit=1)[0]
    if first in _CODE_KEYWORDS:
        return False
    simplified = _ATTRIBUTE_SELECTOR_RE.sub("", _PSEUDO_CALL_RE.sub("", head))
    return re.search(r"[()=\"'$`!?]", simplified) is None


def is_selector_line(line: str) -> bool:
    stripped = line.strip()
    return stripped.endswith("{") and _is_selector_head(stripped[:-1])


def is_declaration_line(line: str) -> bool:
    match = _DECLARATION_RE.match(line)
    if not match:
        return False
    return not _TS_TYPE_VALUE_RE.match(match.group(2).strip())


def is_closing_brace_line(line: str) -> bool:
    return line.strip() == "}"


def is_at_rule_line(line: str) -> bool:
    return _AT_RULE_RE.match(line) is not None


def is_rule_sequence_line(line: str) -> bool:
    """``sel { prop: val } sel2 { prop: val }`` packed on one line."""
    stripped = line.strip()
    if "{" not in stripped:
        return False
    position = 0
    segments = 0
    for match in _RULE_SEGMENT_RE.finditer(stripped):
        if stripped[position:match.start()].strip():
            return False
        head, body = match.group(1), match.group(2)
        if not _is_selector_head(head):
            return False
        for declaration in body.split(";"):
            if declaration.strip() and not _BARE_DECLARATION_RE.match(declaration):
                return False
        position = match.end()
        segments += 1
    return segments > 0 and not stripped[position:].strip()


CSS_LINE_SHAPES: Tuple[Signature, ...] = (
    Signature("selector", predicate=is_selector_line),
    Signature("declaration", predicate=is_declaration_line),
    Signature("closing_brace", predicate=is_closing_brace_line),
    Signature("at_rule", predicate=is_at_rule_line),
    Signature("rule_sequence", predicate=is_rule_sequence_line),
)


# ---------------------------------------------------------------------------
# Filenames and comments (Validator rule 4, Titler)
# ---------------------------------------------------------------------------

FILENAME_EXTENSIONS: Tuple[str, ...] = (
    "js", "jsx", "mjs", "ts", "tsx", "py", "html", "htm", "css", "scss", "java", "cpp", "cc", "hpp",
    "c", "h", "php", "rb", "go", "rs", "swift", "kt", "scala", "sql", "json", "xml", "yaml", "yml",
    "sh", "ps1", "md", "txt", "toml", "conf", "dockerfile",
)

BARE_FILENAME_RE = re.compile(
    r"\.(?:" + "|".join(re.escape(ext) for ext in FILENAME_EXTENSIONS) + r")$",
    re.IGNORECASE,
)

EMBEDDED_FILENAME_RE = re.compile(
    r"(?:^|[\s\"'`(])([\w-]+(?:\.[\w-]+)*\.(?:" + "|".join(re.escape(ext) for ext in FILENAME_EXTENSIONS) + r"))"
    r"(?=[\s\"'`),:]|$)",
    re.IGNORECASE | _M,
)

IDENTIFIER_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(r"^\s*export\s+(?:default\s+)?(?:abstract\s+)?class\s+([A-Za-z_$][\w$]*)", _M),
    re.compile(r"^\s*(?:export\s+)?(?:default\s+)?(?:async\s+)?function\s*\*?\s*([A-Za-z_$][\w$]*)", _M),
    re.compile(r"^\s*(?:async\s+)?def\s+([A-Za-z_]\w*)", _M),
    re.compile(r"^\s*(?:public\s+|private\s+|abstract\s+|final\s+|data\s+|case\s+)*class\s+([A-Za-z_]\w*)", _M),
    re.compile(r"^\s*(?:pub\s+)?fn\s+([A-Za-z_]\w*)", _M),
    re.compile(r"^\s*func\s+(?:\([^)\n]*\)\s*)?([A-Za-z_]\w*)", _M),
)

COMMENT_PATTERNS: Tuple[Tuple[str, Pattern[str]], ...] = (
    ("line_slash", re.compile(r"^//+\s*(.+?)\s*$")),
    ("block", re.compile(r"^/\*+\s*(.+?)\s*\*+/$")),
    ("html", re.compile(r"^<!--\s*(.+?)\s*-->$")),
    ("docstring", re.compile(r"^(?:\"\"\"|''')\s*(.+?)\s*(?:\"\"\"|''')?$")),
    ("hash", re.compile(r"^#(?!!)#*\s*(.+?)\s*$")),
    ("dash", re.compile(r"^--\s*(.+?)\s*$")),
    ("semicolon", re.compile(r"^;+\s*(.+?)\s*$")),
    ("percent", re.compile(r"^%+\s*(.+?)\s*$")),
)
