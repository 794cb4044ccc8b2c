"""Models for explanation results returned by explainers."""

from dataclasses import dataclass


@dataclass(frozen=True, kw_only=True)
class Explanation:
    """Explanation text generated for a failed test."""

    text: str
    attempts: int = 1


@dataclass(frozen=True, kw_only=True)
class ExplanationUnavailable:
    """Marker returned when no explanation could be generated.

    Carries the reason (missing configuration, last failure after all retries)
    so the caller can surface it instead of an empty explanation.
    """

    reason: str
    attempts: int = 0


type ExplanationResult = Explanation | ExplanationUnavailable
