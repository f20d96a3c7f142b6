"""Agent Readiness scoring engine."""

from readiness_scorer.catalog import QuestionCatalog, load_catalog, load_default_catalog
from readiness_scorer.engine import ScoringEngine
from readiness_scorer.exceptions import (
    CatalogLoadError,
    ConfigValidationError,
    InvalidAnswerError,
    ReadinessScorerError,
    ScoringConfigError,
)
from readiness_scorer.schema import (
    PillarScore,
    Question,
    ScoreResult,
    ScoringConfig,
    ScoringPreview,
    TotalScore,
)
from readiness_scorer.scoring_config import (
    DEFAULT_SCORING_CONFIG,
    ENTERPRISE_SCORING_CONFIG,
    STARTUP_SCORING_CONFIG,
    load_scoring_config,
    select_scoring_config,
    validate_scoring_config,
)

__version__ = "1.0.0"

__all__ = [
    "QuestionCatalog",
    "load_catalog",
    "load_default_catalog",
    "ScoringEngine",
    "CatalogLoadError",
    "ConfigValidationError",
    "InvalidAnswerError",
    "ReadinessScorerError",
    "ScoringConfigError",
    "PillarScore",
    "Question",
    "ScoreResult",
    "ScoringConfig",
    "ScoringPreview",
    "TotalScore",
    "DEFAULT_SCORING_CONFIG",
    "ENTERPRISE_SCORING_CONFIG",
    "STARTUP_SCORING_CONFIG",
    "load_scoring_config",
    "select_scoring_config",
    "validate_scoring_config",
]
