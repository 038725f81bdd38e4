"""Detection stages: scan, reveal, validate, classify, title, deduplicate."""

from .classifier import Classifier, classify, extract_language_hint, normalize_language_hint, score
from .deduplicator import Deduplicator
from .revealer import RecoveryAction, Revealer, RevealPolicy, RevealResult
from .scanner import SELECTOR_GROUPS, SELECTORS, Candidate, CandidateScan, Scanner, scan_candidates
from .titler import Titler
from .validator import ValidationResult, Validator, is_valid, validate

__all__ = [
    "Candidate",
    "CandidateScan",
    "Classifier",
    "Deduplicator",
    "RecoveryAction",
    "Revealer",
    "RevealPolicy",
    "RevealResult",
    "SELECTOR_GROUPS",
    "SELECTORS",
    "Scanner",
    "Titler",
    "ValidationResult",
    "Validator",
    "classify",
    "extract_language_hint",
    "is_valid",
    "normalize_language_hint",
    "scan_candidates",
    "score",
    "validate",
]
