"""Collect candidate nodes from a document over a prioritized selector list."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Hashable, List, Sequence, Set, Tuple

from artifact_sync.dom.base import Document, Element
from artifact_sync.exceptions import CrossOriginFrameError
from artifact_sync.schemas.errors import SyncErrorCode, SyncErrorRecord, SyncErrorSource, make_error

logger = logging.getLogger(__name__)

# Ordered by priority; every match of every selector is a candidate.
SELECTOR_GROUPS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("artifact_container", (
        '[data-testid*="artifact"]',
        "[data-artifact-id]",
        '[class*="artifact"]',
    )),
    ("code_block", (
        "pre code",
        "pre",
    )),
    ("prose_code", (
        '[class*="markdown"] pre',
        '[class*="prose"] pre',
    )),
    ("generic_container", (
        ".whitespace-pre-wrap",
        ".font-mono",
        '[class*="code-block"]',
        '[class*="code_block"]',
        '[class*="truncate"]',
        '[class*="line-clamp"]',
    )),
    ("readonly_input", (
        "textarea[readonly]",
        'textarea[class*="code"]',
    )),
)

SELECTORS: Tuple[str, ...] = tuple(selector for _group, selectors in SELECTOR_GROUPS for selector in selectors)


@dataclass
class Candidate:
    element: Element
    selector: str
    frame_url: str | None = None


@dataclass
class CandidateScan:
    candidates: List[Candidate] = field(default_factory=list)
    errors: List[SyncErrorRecord] = field(default_factory=list)


class Scanner:
    def __init__(self, selectors: Sequence[str] = SELECTORS, max_frame_depth: int = 3):
        self.selectors = tuple(selectors)
        self.max_frame_depth = max_frame_depth

    async def scan(self, document: Document) -> CandidateScan:
        result = CandidateScan()
        await self._scan_document(document, result, seen=set(), depth=0)
        logger.debug("Scanner found %d candidates", len(result.candidates))
        return result

    async def _scan_document(self, document: Document, result: CandidateScan, seen: Set[Hashable], depth: int) -> None:
        for selector in self.selectors:
            try:
                elements = await document.query_all(selector)
            except Exception as exc:
                logger.warning("Selector %s failed: %s", selector, exc)
                result.errors.append(
                    make_error(
                        SyncErrorCode.SCAN,
                        SyncErrorSource.SCANNER,
                        f"Selector {selector} failed: {exc}",
                        details={"selector": selector, "url": document.url},
                    )
                )
                continue
            for element in elements:
                if element.key in seen:
                    continue
                seen.add(element.key)
                result.candidates.append(Candidate(element, selector, document.url))

        if depth >= self.max_frame_depth:
            return
        try:
            frames = await document.frames()
        except Exception as exc:
            logger.warning("Could not list frames of %s: %s", document.url, exc)
            return
        for frame in frames:
            try:
                child = await frame.open()
            except CrossOriginFrameError as exc:
                logger.debug("Skipping frame: %s", exc)
                continue
            except Exception as exc:
                logger.warning("Could not open frame %s: %s", frame.url, exc)
                continue
            await self._scan_document(child, result, seen, depth + 1)


async def scan_candidates(document: Document) -> List[Candidate]:
    return (await Scanner().scan(document)).candidates
