"""Scoring Engine - orchestrates question, pillar and total scoring.

Pipeline per question:
1. Normalize the raw answer into [0, 1] (ValueNormalizer)
2. Apply the configured scoring function (functions.apply_scoring)

Question scores are combined into pillar scores with question weights, and
pillar scores into the total with pillar weights. The active scoring
configuration can be swapped at runtime with update_config().

Every top-level call reads the active configuration once and uses that
snapshot for all nested lookups, so a concurrent update_config() can never
produce a result mixing two configuration versions.
"""

import logging
import threading
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from .catalog import QuestionCatalog, load_catalog, load_default_catalog
from .config import EngineSettings, get_settings
from .exceptions import ScoringConfigError
from .functions import apply_scoring
from .normalizer import ValueNormalizer, is_answered, round_half_up
from .preview import (
    build_optimistic_answers,
    count_completed,
    find_missing_critical_questions,
    progress_percentage,
)
from .schema import (
    PillarScore,
    Question,
    ScoreResult,
    ScoringConfig,
    ScoringPreview,
    TotalScore,
)
from .scoring_config import DEFAULT_SCORING_CONFIG, load_scoring_config, validate_scoring_config

logger = logging.getLogger(__name__)

Answers = Mapping[str, Any]


def _percentage(score: float, max_score: float) -> float:
    return round_half_up(score / max_score * 100) if max_score > 0 else 0.0


class ScoringEngine:
    """Calculates readiness scores from wizard answers.

    The engine holds one piece of mutable state: the active ScoringConfig.
    Replace it with update_config(); the new config is validated first and
    the old one stays active if validation fails.
    """

    def __init__(
        self,
        config: Optional[Union[ScoringConfig, Mapping[str, Any]]] = None,
        catalog: Optional[QuestionCatalog] = None,
        settings: Optional[EngineSettings] = None,
    ):
        """Initialize the engine.

        Args:
            config: Initial scoring config. Defaults to the configured
                scoring_config_path, or the built-in default preset.
            catalog: Question catalog. Defaults to the configured
                catalog_path, or the bundled catalog.
            settings: Engine settings. Defaults to the global settings.

        Raises:
            ConfigValidationError: If the initial config is invalid.
        """
        self.settings = settings or get_settings()
        self.catalog = catalog if catalog is not None else self._default_catalog()
        self.normalizer = ValueNormalizer(self.settings.normalization.number_input_default_max)
        self._lock = threading.Lock()

        if config is None:
            config_path = self.settings.sources.scoring_config_path
            if config_path:
                config = load_scoring_config(config_path, self.catalog)
            else:
                config = DEFAULT_SCORING_CONFIG
        self._config = validate_scoring_config(config, self.catalog)

    def _default_catalog(self) -> QuestionCatalog:
        catalog_path = self.settings.sources.catalog_path
        if catalog_path:
            return load_catalog(catalog_path)
        return load_default_catalog()

    @property
    def config(self) -> ScoringConfig:
        """The currently active scoring configuration."""
        return self._config

    @property
    def version(self) -> str:
        return self._config.version

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def calculate_question_score(self, question_id: str, value: Any, question: Question) -> ScoreResult:
        """Score a single answer.

        Raises:
            ScoringConfigError: If the question's pillar or scoring config is missing.
            InvalidAnswerError: If the answer does not fit the question type.
        """
        return self._question_score(self._config, question_id, value, question)

    def calculate_pillar_score(self, pillar_name: str, answers: Answers) -> PillarScore:
        """Score every configured question of one pillar."""
        return self._pillar_score(self._config, pillar_name, answers)

    def calculate_total_score(self, answers: Answers) -> TotalScore:
        """Score all pillars and combine them with pillar weights."""
        return self._total_score(self._config, answers)

    def generate_scoring_preview(self, answers: Answers, current_step: Optional[int] = None) -> ScoringPreview:
        """Build a real-time preview: current score, progress and potential score."""
        config = self._config
        preview_settings = self.settings.preview
        questions = self.catalog.get_all_questions()

        current_score = self._total_score(config, answers)

        optimistic = build_optimistic_answers(
            answers, questions, self.settings.normalization.number_input_default_max
        )
        potential_score = self._total_score(config, optimistic).total_score

        completed = count_completed(answers, self.catalog, preview_settings.count_unknown_answers)
        total = len(questions)

        return ScoringPreview(
            current_score=current_score,
            potential_score=potential_score,
            progress_percentage=progress_percentage(completed, total),
            completed_questions=completed,
            total_questions=total,
            missing_critical_questions=find_missing_critical_questions(
                config, self.catalog, answers, preview_settings.critical_weight_threshold
            ),
            current_step=current_step,
        )

    def update_config(self, new_config: Union[ScoringConfig, Mapping[str, Any]]) -> ScoringConfig:
        """Validate and atomically install a new scoring configuration.

        Calculations already running keep the config they started with.

        Raises:
            ConfigValidationError: If the new config is invalid. The previous
                config stays active.
        """
        validated = validate_scoring_config(new_config, self.catalog)
        with self._lock:
            previous = self._config
            self._config = validated
        logger.info("Scoring configuration updated from version %s to %s",
                    previous.version, validated.version)
        return validated

    def reload_config(self, path: Union[str, Path]) -> ScoringConfig:
        """Load a scoring config file and install it (hot-reload entry point)."""
        return self.update_config(load_scoring_config(path, self.catalog))

    # -------------------------------------------------------------------------
    # Calculation against an explicit config snapshot
    # -------------------------------------------------------------------------

    def _question_score(
        self, config: ScoringConfig, question_id: str, value: Any, question: Question
    ) -> ScoreResult:
        pillar = question.pillar
        if not pillar or pillar not in config.pillars:
            raise ScoringConfigError(f"Invalid pillar for question {question_id}: {pillar!r}")

        question_config = config.pillars[pillar].questions.get(question_id)
        if question_config is None:
            raise ScoringConfigError(f"No scoring config found for question {question_id}")

        normalized = self.normalizer.normalize(value, question)
        score = apply_scoring(normalized, question_config, question, value)

        return ScoreResult(
            question_id=question_id,
            raw_value=value,
            normalized_value=normalized,
            score=round_half_up(score),
            max_score=question_config.max_score,
            pillar=pillar,
        )

    def _pillar_score(self, config: ScoringConfig, pillar_name: str, answers: Answers) -> PillarScore:
        pillar_config = config.pillars.get(pillar_name)
        if pillar_config is None:
            raise ScoringConfigError(f"Invalid pillar: {pillar_name}")

        question_scores = []
        total = 0.0
        max_total = 0.0

        for question_id, question_config in pillar_config.questions.items():
            # Catalog drift is tolerated here only: a configured question that
            # has disappeared from the catalog is skipped, whereas a question
            # without scoring config fails in _question_score.
            question = self.catalog.find_question(question_id)
            if question is None:
                logger.warning("Question %s of pillar %s not found in catalog; skipping",
                               question_id, pillar_name)
                continue

            answer = answers.get(question_id)
            if is_answered(answer):
                result = self._question_score(config, question_id, answer, question)
                total += result.score * question_config.weight
            else:
                # Missing answers score zero but still count toward the maximum
                result = ScoreResult(
                    question_id=question_id,
                    raw_value=None,
                    normalized_value=0.0,
                    score=0.0,
                    max_score=question_config.max_score,
                    pillar=pillar_name,
                )
            question_scores.append(result)
            max_total += question_config.max_score * question_config.weight

        logger.debug("Pillar %s: %.2f / %.2f (config %s)", pillar_name, total, max_total, config.version)

        return PillarScore(
            pillar=pillar_name,
            score=round_half_up(total),
            max_score=round_half_up(max_total),
            percentage=_percentage(total, max_total),
            question_scores=question_scores,
        )

    def _total_score(self, config: ScoringConfig, answers: Answers) -> TotalScore:
        pillar_scores = []
        total = 0.0
        max_total = 0.0

        for pillar_name, pillar_config in config.pillars.items():
            pillar_score = self._pillar_score(config, pillar_name, answers)
            pillar_scores.append(pillar_score)
            total += pillar_score.score * pillar_config.weight
            max_total += pillar_score.max_score * pillar_config.weight

        return TotalScore(
            total_score=round_half_up(total),
            max_total_score=round_half_up(max_total),
            percentage=_percentage(total, max_total),
            pillar_scores=pillar_scores,
            version=config.version,
        )
