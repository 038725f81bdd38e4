from __future__ import annotations

from artifact_sync.detection.revealer import DEFAULT_ACTIONS, RecoveryAction, Revealer, RevealPolicy
from artifact_sync.runtime.pipeline import ArtifactPipeline

PYTHON_SNIPPET = 'def foo():\n    """Return the answer to the ultimate question."""\n    pass'

SCENARIO_A_HTML = f'<html><body><pre><code class="language-python">{PYTHON_SNIPPET}</code></pre></body></html>'

CSS_DUMP_LINE = "html[lang] body.dark { color: red; } .x{display:none}"

JS_SNIPPET = (
    "// Debounce helper for search inputs\n"
    "function debounce(fn, wait) {\n"
    "  let timer;\n"
    "  return (...args) => {\n"
    "    clearTimeout(timer);\n"
    "    timer = setTimeout(() => fn(...args), wait);\n"
    "  };\n"
    "}"
)

CHAT_PAGE_HTML = f"""
<html>
<head><title>Chat</title></head>
<body>
  <nav class="sidebar">New chat Chats Projects Recents</nav>
  <div data-message-author-role="assistant" class="message">
    <p>Sure. Here is a small debounce helper:</p>
    <pre><code class="language-javascript">{JS_SNIPPET}</code></pre>
    <button>Copy code</button>
  </div>
  <div class="font-mono">{CSS_DUMP_LINE}</div>
</body>
</html>
"""


def fast_policy(**overrides) -> RevealPolicy:
    """Reveal policy with no settle or restore delays."""
    actions = tuple(RecoveryAction(action.name, 0, action.timeout) for action in DEFAULT_ACTIONS)
    values = {"actions": actions, "restore_delay": 0}
    values.update(overrides)
    return RevealPolicy(**values)


def fast_pipeline(**kwargs) -> ArtifactPipeline:
    kwargs.setdefault("revealer", Revealer(fast_policy()))
    return ArtifactPipeline(**kwargs)
