"""Exception types raised by the readiness scoring engine."""

from typing import Iterable, Optional


class ReadinessScorerError(Exception):
    """Base class for all scoring engine errors."""


class ScoringConfigError(ReadinessScorerError):
    """Raised when the active scoring configuration cannot score an answer.

    Fatal to the calculation call that hit it, never to the process. A
    configuration problem must not be turned into a silent zero score.
    """


class ConfigValidationError(ScoringConfigError):
    """Raised when a scoring configuration violates its structural invariants."""

    def __init__(self, issues: Iterable[str], version: Optional[str] = None):
        self.issues = list(issues)
        self.version = version
        label = f"Scoring config {version!r}" if version else "Scoring config"
        summary = "; ".join(self.issues) if self.issues else "unknown error"
        super().__init__(f"{label} is invalid: {summary}")


class InvalidAnswerError(ReadinessScorerError):
    """Raised when a raw answer does not match its question's answer type."""

    def __init__(self, question_id: str, value: object, reason: str):
        self.question_id = question_id
        self.value = value
        super().__init__(f"Invalid answer for {question_id}: {reason} (got {value!r})")


class CatalogLoadError(ReadinessScorerError):
    """Raised when a question catalog file cannot be loaded."""
