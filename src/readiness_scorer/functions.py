"""Scoring Function Library.

Pure functions turning a normalized value (or, for weighted scoring, the
raw selected option ids) into a score bounded by the question's max score.
"""

from typing import Any, Callable

from .exceptions import ScoringConfigError
from .schema import (
    ExponentialScoring,
    LinearScoring,
    Question,
    QuestionScoringConfig,
    QuestionType,
    ThresholdScoring,
    WeightedScoring,
)

# Thresholds are authored against a 0-10 scale
THRESHOLD_SCALE = 10


def _require_number(normalized_value: Any, config: QuestionScoringConfig, question: Question) -> float:
    if isinstance(normalized_value, bool) or not isinstance(normalized_value, (int, float)):
        raise ScoringConfigError(
            f"Question {question.id} ({question.type.value}) cannot use "
            f"{config.scoring_function} scoring; select questions require weighted scoring"
        )
    return float(normalized_value)


def linear_scoring(normalized_value: float, config: LinearScoring) -> float:
    """Direct proportional mapping."""
    return normalized_value * config.max_score


def exponential_scoring(normalized_value: float, config: ExponentialScoring) -> float:
    """Reward higher values disproportionately.

    Normalized against the same formula evaluated at a value of 1.
    """
    params = config.exponential_config
    constant = params.normalizing_constant
    if constant <= 0:
        raise ScoringConfigError("Exponential scoring needs base ** multiplier + offset > 0")

    raw = (normalized_value * params.base) ** params.multiplier + params.offset
    return max(0.0, min(raw / constant * config.max_score, config.max_score))


def threshold_scoring(normalized_value: float, config: ThresholdScoring) -> float:
    """Discrete score bands. The first band (by ascending min) containing the value wins."""
    scaled = normalized_value * THRESHOLD_SCALE
    for band in sorted(config.threshold_config.thresholds, key=lambda t: t.min):
        if band.min <= scaled <= band.max:
            return band.score
    return 0.0


def weighted_scoring(raw_value: Any, question: Question, config: WeightedScoring) -> float:
    """Score from the predefined weights of the selected option(s)."""
    options = question.options

    if question.type == QuestionType.MULTI_SELECT:
        selected = raw_value if isinstance(raw_value, (list, tuple, set)) else [raw_value]
        weights = {opt.id: opt.weight or 0.0 for opt in options}
        chosen = sum(weights.get(str(option_id), 0.0) for option_id in set(selected))
        max_weight = sum(weights.values()) or 1.0
        return min(chosen / max_weight, 1.0) * config.max_score

    wanted = str(raw_value)
    option = next((opt for opt in options if str(opt.value) == wanted or opt.id == wanted), None)
    weight = (option.weight or 0.0) if option else 0.0
    max_weight = max((opt.weight or 0.0 for opt in options), default=0.0)
    if max_weight <= 0:
        return 0.0
    return weight / max_weight * config.max_score


ScoringCallable = Callable[[Any, QuestionScoringConfig, Question, Any], float]

SCORING_FUNCTIONS: dict[str, ScoringCallable] = {
    "linear": lambda norm, cfg, q, raw: linear_scoring(_require_number(norm, cfg, q), cfg),
    "exponential": lambda norm, cfg, q, raw: exponential_scoring(_require_number(norm, cfg, q), cfg),
    "threshold": lambda norm, cfg, q, raw: threshold_scoring(_require_number(norm, cfg, q), cfg),
    "weighted": lambda norm, cfg, q, raw: weighted_scoring(raw, q, cfg),
}


def apply_scoring(
    normalized_value: Any,
    config: QuestionScoringConfig,
    question: Question,
    raw_value: Any,
) -> float:
    """Apply the configured scoring function.

    Raises:
        ScoringConfigError: For an unregistered scoring function or a
            function that cannot handle the question type.
    """
    function = SCORING_FUNCTIONS.get(config.scoring_function)
    if function is None:
        raise ScoringConfigError(f"Unknown scoring function: {config.scoring_function}")
    return function(normalized_value, config, question, raw_value)
