"""Scoring Preview helpers.

Builds the optimistic answer set behind the potential score, and finds the
required, heavily weighted questions that are still unanswered.
"""

from typing import Any, Mapping

from .catalog import QuestionCatalog
from .normalizer import DEFAULT_NUMBER_INPUT_MAX, is_answered, round_half_up
from .schema import AnswerValue, Question, QuestionType, ScoringConfig

# Unanswered required questions weighted above this are critical
DEFAULT_CRITICAL_WEIGHT_THRESHOLD = 0.3


def optimal_answer(question: Question, number_input_default_max: float = DEFAULT_NUMBER_INPUT_MAX) -> AnswerValue:
    """The best-scoring answer for a question, or None if it cannot score."""
    if question.type == QuestionType.SCALE_RATING:
        return question.scale_range[1]
    if question.type == QuestionType.PERCENTAGE:
        return 100
    if question.type == QuestionType.NUMBER_INPUT:
        # A lone max is not a range; normalization then divides by the default max
        validation = question.validation
        if validation and validation.min is not None and validation.max is not None:
            return validation.max
        return number_input_default_max
    if question.type == QuestionType.YES_NO:
        return "yes"
    if question.type == QuestionType.SINGLE_SELECT:
        if not question.options:
            return None
        best = max(question.options, key=lambda opt: opt.weight or 0)
        return best.value if best.value != "" else best.id
    if question.type == QuestionType.MULTI_SELECT:
        return [opt.id for opt in question.options]
    return None


def build_optimistic_answers(
    answers: Mapping[str, Any],
    questions: list[Question],
    number_input_default_max: float = DEFAULT_NUMBER_INPUT_MAX,
) -> dict[str, Any]:
    """Copy the answers and fill every unanswered question with its optimal value."""
    optimistic = dict(answers)
    for question in questions:
        if is_answered(optimistic.get(question.id)):
            continue
        best = optimal_answer(question, number_input_default_max)
        if best is not None:
            optimistic[question.id] = best
    return optimistic


def find_missing_critical_questions(
    config: ScoringConfig,
    catalog: QuestionCatalog,
    answers: Mapping[str, Any],
    threshold: float = DEFAULT_CRITICAL_WEIGHT_THRESHOLD,
) -> list[str]:
    """Required questions weighted above the threshold that have no answer."""
    critical = []
    for pillar in config.pillars.values():
        for question_id, question_config in pillar.questions.items():
            if question_config.weight <= threshold or is_answered(answers.get(question_id)):
                continue
            question = catalog.find_question(question_id)
            if question is not None and question.required:
                critical.append(question_id)
    return critical


def count_completed(
    answers: Mapping[str, Any],
    catalog: QuestionCatalog,
    count_unknown_answers: bool = True,
) -> int:
    """Number of completed questions.

    With ``count_unknown_answers`` every key in the answers counts, including
    ids the catalog does not know.
    """
    if count_unknown_answers:
        return len(answers)
    return sum(1 for question_id in answers if question_id in catalog)


def progress_percentage(completed: int, total: int) -> int:
    if total <= 0:
        return 0
    return int(round_half_up(completed / total * 100, 0))
