"""One scan: Scanner -> Revealer -> Validator -> Classifier -> Titler -> Deduplicator."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from artifact_sync.detection.classifier import Classifier, extract_language_hint
from artifact_sync.detection.deduplicator import Deduplicator
from artifact_sync.detection.revealer import Revealer
from artifact_sync.detection.scanner import Candidate, Scanner
from artifact_sync.detection.titler import Titler
from artifact_sync.detection.validator import Validator
from artifact_sync.dom.base import Document
from artifact_sync.runtime.artifact_store import ArtifactSnapshot
from artifact_sync.schemas import Artifact, Settings
from artifact_sync.schemas.errors import SyncErrorCode, SyncErrorRecord, SyncErrorSource, make_error

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 80


@dataclass(frozen=True)
class Rejection:
    reason: str
    preview: str
    selector: str


@dataclass
class ScanResult:
    snapshot: ArtifactSnapshot
    artifacts: List[Artifact] = field(default_factory=list)
    new_artifacts: List[Artifact] = field(default_factory=list)
    rejections: List[Rejection] = field(default_factory=list)
    errors: List[SyncErrorRecord] = field(default_factory=list)


class ArtifactPipeline:
    """Runs every detection stage over a document handed in by the caller."""

    def __init__(
        self,
        scanner: Optional[Scanner] = None,
        revealer: Optional[Revealer] = None,
        validator: Optional[Validator] = None,
        classifier: Optional[Classifier] = None,
        titler: Optional[Titler] = None,
        deduplicator: Optional[Deduplicator] = None,
    ):
        self.scanner = scanner or Scanner()
        self.revealer = revealer or Revealer()
        self.validator = validator or Validator()
        self.classifier = classifier or Classifier()
        self.titler = titler or Titler()
        self.deduplicator = deduplicator or Deduplicator()

    async def scan(
        self,
        document: Document,
        previous: Optional[ArtifactSnapshot] = None,
        settings: Optional[Settings] = None,
    ) -> ScanResult:
        if settings is not None and not settings.allows_url(document.url):
            logger.debug("Host of %s is not allowed; skipping scan", document.url)
            return ScanResult(snapshot=ArtifactSnapshot())

        found = await self.scanner.scan(document)
        result = ScanResult(snapshot=ArtifactSnapshot(), errors=list(found.errors))

        detected: List[Artifact] = []
        for candidate in found.candidates:
            try:
                artifact = await self._process(candidate, result)
            except Exception as exc:
                logger.warning("Extraction failed for %r (%s): %s", candidate.element, candidate.selector, exc)
                result.errors.append(
                    make_error(
                        SyncErrorCode.EXTRACTION,
                        SyncErrorSource.PIPELINE,
                        f"Extraction failed: {exc}",
                        details={"selector": candidate.selector, "frame_url": candidate.frame_url},
                    )
                )
                continue
            if artifact is not None:
                detected.append(artifact)

        earlier = previous.artifacts() if previous is not None else []
        result.artifacts = self.deduplicator.fold(detected, earlier)
        result.snapshot = ArtifactSnapshot(result.artifacts)
        result.new_artifacts = [
            artifact for artifact in result.artifacts
            if previous is None or artifact.artifact_id not in previous
        ]
        logger.info(
            "Scan found %d artifacts (%d new, %d rejected, %d errors)",
            len(result.artifacts), len(result.new_artifacts), len(result.rejections), len(result.errors),
        )
        return result

    async def _process(self, candidate: Candidate, result: ScanResult) -> Optional[Artifact]:
        revealed = await self.revealer.reveal(candidate.element)
        text = revealed.text
        verdict = self.validator.validate(text)
        if not verdict.accepted:
            result.rejections.append(Rejection(verdict.reason, text[:PREVIEW_LENGTH], candidate.selector))
            return None

        language = await extract_language_hint(candidate.element) or self.classifier.classify(text)
        title = await self.titler.title(candidate.element, text, language)
        return Artifact(content=text, title=title, language=language)
