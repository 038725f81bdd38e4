"""Best-effort extraction of truncated, collapsed or lazily rendered text.

Reading is tried with several strategies and the longest result wins. When
the element looks clipped, an ordered recovery policy is applied: each action
is bounded by a timeout, followed by a settle delay, and the strategies are
re-read afterwards. Nothing here is required to succeed.
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, Hashable, List, Optional, Set, Tuple

from bs4 import BeautifulSoup

from artifact_sync.dom.base import Element
from artifact_sync.exceptions import ElementAccessError

logger = logging.getLogger(__name__)

READ_STRATEGIES: Tuple[str, ...] = ("value", "text_content", "inner_text", "stripped_markup")

RELAXED_STYLES: Dict[str, str] = {
    "overflow": "visible",
    "max-height": "none",
    "text-overflow": "clip",
    "-webkit-line-clamp": "unset",
}

TRUNCATION_MARKERS: Tuple[str, ...] = ("truncate", "line-clamp", "collapsed", "clamp", "overflow-hidden", "max-h-")
CONTROL_SELECTOR = 'button, summary, [role="button"], a'
SHOW_MORE_RE = re.compile(
    r"\b(?:show|view|see|read|load)\s+(?:more|all|full|entire|the\s+rest)\b|\bexpand\b",
    re.IGNORECASE,
)
SCROLL_ANCESTOR_DEPTH = 10

Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RecoveryAction:
    name: str
    settle_delay: float
    timeout: float = 1.0


DEFAULT_ACTIONS: Tuple[RecoveryAction, ...] = (
    RecoveryAction("click_toggles", settle_delay=0.3),
    RecoveryAction("relax_clipping", settle_delay=0.1),
    RecoveryAction("scroll_ancestor", settle_delay=0.2),
)


@dataclass
class RevealPolicy:
    actions: Tuple[RecoveryAction, ...] = DEFAULT_ACTIONS
    size_threshold: int = 200
    restore_delay: float = 1.5
    max_toggle_clicks: int = 3


@dataclass
class RevealResult:
    text: str
    strategy: str
    actions: List[str] = field(default_factory=list)


def strip_markup(html: str) -> str:
    return BeautifulSoup(html, "html.parser").get_text()


class Revealer:
    def __init__(self, policy: Optional[RevealPolicy] = None, sleep: Sleep = asyncio.sleep):
        self.policy = policy or RevealPolicy()
        self._sleep = sleep
        self._pending: Set[asyncio.Task] = set()

    async def reveal(self, element: Element) -> RevealResult:
        best = await self.read(element)
        if not await self.needs_escalation(element, best.text):
            return best

        for action in self.policy.actions:
            try:
                await asyncio.wait_for(self._run_action(action.name, element), action.timeout)
            except Exception as exc:
                logger.debug("Reveal action %s failed on %r: %s", action.name, element, exc)
                continue
            best.actions.append(action.name)
            await self._sleep(action.settle_delay)
            try:
                current = await self.read(element)
            except ElementAccessError as exc:
                logger.debug("Re-read after %s failed: %s", action.name, exc)
                continue
            if len(current.text) > len(best.text):
                best = RevealResult(current.text, current.strategy, best.actions)
        return best

    async def read(self, element: Element) -> RevealResult:
        """Apply every read strategy; longest trimmed text wins, ties go to the earliest."""
        best: Optional[RevealResult] = None
        failures: List[str] = []
        for strategy in READ_STRATEGIES:
            try:
                raw = await self._read_with(strategy, element)
            except Exception as exc:
                failures.append(f"{strategy}: {exc}")
                continue
            if raw is None:
                continue
            text = raw.strip()
            if best is None or len(text) > len(best.text):
                best = RevealResult(text, strategy)
        if best is None:
            if failures:
                raise ElementAccessError("; ".join(failures))
            return RevealResult("", READ_STRATEGIES[0])
        return best

    async def needs_escalation(self, element: Element, text: str) -> bool:
        if len(text) < self.policy.size_threshold:
            return True
        if self._has_truncation_marker(element):
            return True
        try:
            style = await element.computed_style()
            if self._style_clips(style):
                return True
            scroll_height, client_height = await element.scroll_size()
        except Exception as exc:
            logger.debug("Could not inspect layout of %r: %s", element, exc)
            return False
        return scroll_height > client_height

    async def drain(self) -> None:
        """Wait for pending style restorations."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def _read_with(self, strategy: str, element: Element) -> Optional[str]:
        if strategy == "value":
            return await element.value()
        if strategy == "text_content":
            return await element.text_content()
        if strategy == "inner_text":
            return await element.inner_text()
        return strip_markup(await element.inner_html())

    @staticmethod
    def _has_truncation_marker(element: Element) -> bool:
        class_name = element.class_name.lower()
        if any(marker in class_name for marker in TRUNCATION_MARKERS):
            return True
        if element.get_attribute("aria-expanded") == "false":
            return True
        return element.get_attribute("data-truncated") is not None

    @staticmethod
    def _style_clips(style: Dict[str, str]) -> bool:
        for prop in ("overflow", "overflow-x", "overflow-y"):
            if style.get(prop, "").strip() in ("hidden", "clip"):
                return True
        if style.get("text-overflow", "").strip() == "ellipsis":
            return True
        clamp = style.get("-webkit-line-clamp", "").strip()
        return clamp not in ("", "none", "unset")

    async def _run_action(self, name: str, element: Element) -> None:
        if name == "click_toggles":
            await self._click_toggles(element)
        elif name == "relax_clipping":
            await self._relax_clipping(element)
        elif name == "scroll_ancestor":
            await self._scroll_ancestor(element)
        else:
            raise ValueError(f"Unknown reveal action: {name}")

    async def _click_toggles(self, element: Element) -> None:
        if self._is_toggle(element) and not self._navigates(element):
            await element.click()

        clicked: Set[Hashable] = set()
        scopes = [element]
        parent = await element.parent()
        if parent is not None:
            scopes.append(parent)
        for scope in scopes:
            for control in await scope.query_all(CONTROL_SELECTOR):
                if len(clicked) >= self.policy.max_toggle_clicks:
                    return
                if control.key in clicked or control.key == element.key:
                    continue
                if self._navigates(control):
                    continue
                if await self._is_show_more(control):
                    await control.click()
                    clicked.add(control.key)

    @staticmethod
    def _navigates(control: Element) -> bool:
        # links with a real target navigate away
        if control.tag != "a":
            return False
        href = (control.get_attribute("href") or "").strip()
        return bool(href) and not href.startswith(("#", "javascript:"))

    @staticmethod
    def _is_toggle(element: Element) -> bool:
        if element.tag in ("summary", "button"):
            return True
        return element.get_attribute("aria-expanded") is not None or element.get_attribute("role") == "button"

    @staticmethod
    async def _is_show_more(control: Element) -> bool:
        if control.get_attribute("aria-expanded") == "false":
            return True
        label = control.get_attribute("aria-label") or await control.text_content()
        return bool(SHOW_MORE_RE.search(" ".join(label.split())))

    async def _relax_clipping(self, element: Element) -> None:
        previous = await element.apply_styles(RELAXED_STYLES)
        task = asyncio.create_task(self._restore_later(element, previous))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _restore_later(self, element: Element, previous: Dict[str, str]) -> None:
        await self._sleep(self.policy.restore_delay)
        try:
            await element.restore_styles(previous)
        except Exception as exc:
            logger.debug("Could not restore styles on %r: %s", element, exc)

    async def _scroll_ancestor(self, element: Element) -> None:
        current: Optional[Element] = element
        for _ in range(SCROLL_ANCESTOR_DEPTH):
            if current is None:
                break
            scroll_height, client_height = await current.scroll_size()
            style = await current.computed_style()
            scrollable = style.get("overflow-y", style.get("overflow", "")) in ("auto", "scroll")
            if scroll_height > client_height or scrollable:
                await current.scroll_to_end()
                return
            current = await current.parent()
        await element.scroll_to_end()
