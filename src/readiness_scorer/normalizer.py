"""Value Normalizer - first stage of question scoring.

Converts a raw wizard answer plus its question definition into a
dimensionless value in [0, 1]. Select answers are passed through untouched
for weighted scoring, which works on option identity rather than magnitude.
"""

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from .exceptions import InvalidAnswerError
from .schema import AnswerValue, Question, QuestionType

# Upper bound assumed for number inputs without validation bounds.
# The value is arbitrary; override it through NormalizationSettings.
DEFAULT_NUMBER_INPUT_MAX = 100.0

YES_VALUES = {"yes"}


def is_answered(value: Any) -> bool:
    """Check whether a raw answer counts as provided."""
    return value is not None and value != ""


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def round_half_up(value: float, digits: int = 2) -> float:
    """Round with halves away from zero, so 0.125 becomes 0.13 rather than 0.12."""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


class ValueNormalizer:
    """Normalizes raw answers into [0, 1]."""

    def __init__(self, number_input_default_max: float = DEFAULT_NUMBER_INPUT_MAX):
        self.number_input_default_max = number_input_default_max

    def normalize(self, value: AnswerValue, question: Question) -> Any:
        """Normalize a raw answer for its question.

        Returns a float in [0, 1], or the raw value for select questions.

        Raises:
            InvalidAnswerError: If a numeric question receives a non-numeric answer.
        """
        if not is_answered(value):
            return 0.0

        qtype = question.type
        if qtype == QuestionType.SCALE_RATING:
            low, high = question.scale_range
            return _clamp((self._to_number(value, question) - low) / (high - low))

        if qtype.is_select():
            return value

        if qtype == QuestionType.YES_NO:
            if value is True:
                return 1.0
            if isinstance(value, str) and value.strip().lower() in YES_VALUES:
                return 1.0
            return 0.0

        if qtype == QuestionType.PERCENTAGE:
            return _clamp(self._to_number(value, question) / 100)

        if qtype == QuestionType.NUMBER_INPUT:
            number = self._to_number(value, question)
            validation = question.validation
            if validation and validation.min is not None and validation.max is not None:
                return _clamp((number - validation.min) / (validation.max - validation.min))
            return _clamp(number / self.number_input_default_max)

        # text_input carries no score
        return 0.0

    def _to_number(self, value: Any, question: Question) -> float:
        """Coerce a numeric answer, rejecting anything that is not a finite number."""
        if isinstance(value, bool):
            raise InvalidAnswerError(question.id, value, "expected a number, not a boolean")
        if isinstance(value, (int, float)):
            number = float(value)
        elif isinstance(value, str):
            try:
                number = float(value.strip())
            except ValueError:
                raise InvalidAnswerError(question.id, value, "expected a numeric value") from None
        else:
            raise InvalidAnswerError(question.id, value, f"expected a number, got {type(value).__name__}")

        if not math.isfinite(number):
            raise InvalidAnswerError(question.id, value, "expected a finite number")
        return number
