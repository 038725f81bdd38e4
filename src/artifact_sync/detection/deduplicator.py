"""Three-tier duplicate detection within a scan and across snapshots."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence

from artifact_sync.schemas.artifact import Artifact
from artifact_sync.utils.text_analysis import normalize_for_comparison, similarity

logger = logging.getLogger(__name__)

DEFAULT_SIMILARITY_THRESHOLD = 0.9
SIMILARITY_MIN_LENGTH = 100
LENGTH_TOLERANCE = 0.2


class Deduplicator:
    """Decide whether an artifact repeats one that was already accepted.

    A candidate is a duplicate when any tier matches:

    1. normalized contents are identical;
    2. both normalized contents exceed ``SIMILARITY_MIN_LENGTH`` characters
       and their position-wise similarity exceeds ``threshold``;
    3. same title (case-insensitive) and language, with content lengths
       within ``length_tolerance`` of the longer one.

    Args:
        threshold: Similarity ratio above which contents are the same.
        window: Compare only the first ``window`` characters; ``None``
            compares the whole normalized strings.
        length_tolerance: Allowed relative length difference for the
            title+language tier.
    """

    def __init__(
        self,
        threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
        window: Optional[int] = None,
        length_tolerance: float = LENGTH_TOLERANCE,
    ):
        self.threshold = threshold
        self.window = window
        self.length_tolerance = length_tolerance

    def find_duplicate(self, candidate: Artifact, accepted: Iterable[Artifact]) -> Optional[Artifact]:
        normalized = normalize_for_comparison(candidate.content)
        title = candidate.title.casefold()
        for existing in accepted:
            other = normalize_for_comparison(existing.content)
            if normalized == other:
                return existing
            if (
                len(normalized) > SIMILARITY_MIN_LENGTH
                and len(other) > SIMILARITY_MIN_LENGTH
                and similarity(normalized, other, self.window) > self.threshold
            ):
                return existing
            if (
                existing.language == candidate.language
                and existing.title.casefold() == title
                and self._lengths_close(candidate.content_length, existing.content_length)
            ):
                return existing
        return None

    def is_duplicate(self, candidate: Artifact, accepted: Iterable[Artifact]) -> bool:
        return self.find_duplicate(candidate, accepted) is not None

    def fold(self, artifacts: Sequence[Artifact], previous: Optional[Sequence[Artifact]] = None) -> List[Artifact]:
        """Reduce one scan's artifacts to a duplicate-free list.

        A candidate whose normalized content equals an artifact of the previous
        snapshot is replaced by that earlier record so its identity and
        timestamp survive rescans. A candidate that only resembles an earlier
        record (grown, streamed or regenerated) is kept as the latest version.
        """
        previous = list(previous or ())
        result: List[Artifact] = []
        for candidate in artifacts:
            if self.is_duplicate(candidate, result):
                logger.debug("Dropping in-scan duplicate %s", candidate.title)
                continue
            earlier = self.find_unchanged(candidate, previous)
            chosen = earlier if earlier is not None else candidate
            if chosen is not candidate and self.is_duplicate(chosen, result):
                continue
            result.append(chosen)
        return result

    @staticmethod
    def find_unchanged(candidate: Artifact, previous: Iterable[Artifact]) -> Optional[Artifact]:
        """Return the earlier record with the same normalized content, if any."""
        normalized = normalize_for_comparison(candidate.content)
        for existing in previous:
            if normalize_for_comparison(existing.content) == normalized:
                return existing
        return None

    def _lengths_close(self, first: int, second: int) -> bool:
        longest = max(first, second)
        if longest == 0:
            return True
        return abs(first - second) <= self.length_tolerance * longest
