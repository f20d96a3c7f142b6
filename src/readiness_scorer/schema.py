"""Pydantic models for the Agent Readiness scoring engine.

Input schemas for the question catalog and the versioned scoring
configuration, and output schemas for question, pillar and total scores.
Field names are snake_case; the camelCase names used by the admin UI JSON
are accepted as aliases.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


# Raw answer values as submitted by the wizard
AnswerValue = Union[str, int, float, bool, list[str], None]

# Range assumed for scale ratings without validation bounds
DEFAULT_SCALE_MIN = 1.0
DEFAULT_SCALE_MAX = 10.0


class CamelModel(BaseModel):
    """Base model accepting both snake_case and camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FrozenCamelModel(CamelModel):
    """Immutable variant used for catalog and configuration data."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


# =============================================================================
# Question Catalog
# =============================================================================


class QuestionType(str, Enum):
    """Wizard question input types."""
    SINGLE_SELECT = "single_select"
    MULTI_SELECT = "multi_select"
    TEXT_INPUT = "text_input"
    NUMBER_INPUT = "number_input"
    SCALE_RATING = "scale_rating"
    YES_NO = "yes_no"
    PERCENTAGE = "percentage"

    def is_select(self) -> bool:
        """Check if answers to this type are option identifiers."""
        return self in (self.SINGLE_SELECT, self.MULTI_SELECT)


class QuestionOption(FrozenCamelModel):
    """A selectable option of a select question."""
    id: str
    value: Union[str, int, float]
    label: str
    description: Optional[str] = None
    weight: Optional[float] = Field(None, ge=0, description="Used by weighted scoring")


class QuestionValidation(FrozenCamelModel):
    """Form validation bounds, also used as normalization ranges."""
    min: Optional[float] = None
    max: Optional[float] = None
    pattern: Optional[str] = None
    message: Optional[str] = None

    @model_validator(mode="after")
    def _check_range(self) -> "QuestionValidation":
        if self.min is not None and self.max is not None and self.min >= self.max:
            raise ValueError(f"validation min ({self.min}) must be below max ({self.max})")
        return self


class QuestionScoring(FrozenCamelModel):
    """Scoring metadata attached to a question."""
    pillar: str


class Question(FrozenCamelModel):
    """A wizard question definition. Immutable at runtime."""
    id: str
    step_id: Optional[str] = None
    type: QuestionType
    title: str = ""
    description: Optional[str] = None
    required: bool = False
    options: list[QuestionOption] = Field(default_factory=list)
    validation: Optional[QuestionValidation] = None
    scoring: Optional[QuestionScoring] = None

    @model_validator(mode="after")
    def _check_scale_range(self) -> "Question":
        if self.type == QuestionType.SCALE_RATING:
            low, high = self.scale_range
            if low >= high:
                raise ValueError(
                    f"scale_rating question {self.id} has an empty range [{low:g}, {high:g}]"
                )
        return self

    @property
    def scale_range(self) -> tuple[float, float]:
        """Effective scale bounds, falling back to 1-10 for a missing bound."""
        validation = self.validation
        low = validation.min if validation and validation.min is not None else DEFAULT_SCALE_MIN
        high = validation.max if validation and validation.max is not None else DEFAULT_SCALE_MAX
        return low, high

    @property
    def pillar(self) -> Optional[str]:
        return self.scoring.pillar if self.scoring else None

    @property
    def is_select(self) -> bool:
        return self.type.is_select()


class WizardStep(FrozenCamelModel):
    """A wizard step grouping questions."""
    id: str
    title: str = ""
    description: Optional[str] = None
    order: int = 0
    questions: list[Question] = Field(default_factory=list)


class CatalogDefinition(FrozenCamelModel):
    """Serialized form of the question catalog."""
    version: str = "1.0.0"
    title: Optional[str] = None
    steps: list[WizardStep] = Field(default_factory=list)


# =============================================================================
# Scoring Configuration
# =============================================================================


class ScoringFunction(str, Enum):
    """Available scoring functions."""
    LINEAR = "linear"
    EXPONENTIAL = "exponential"
    THRESHOLD = "threshold"
    WEIGHTED = "weighted"


class ExponentialConfig(FrozenCamelModel):
    """Parameters of exponential scoring: (value * base) ** multiplier + offset."""
    base: float = Field(..., gt=0)
    multiplier: float = Field(..., gt=0)
    offset: float = 0.0

    @property
    def normalizing_constant(self) -> float:
        """The formula evaluated at a normalized value of 1."""
        return self.base ** self.multiplier + self.offset


class Threshold(FrozenCamelModel):
    """A score band authored against a 0-10 scale, inclusive on both ends."""
    min: float
    max: float
    score: float

    @model_validator(mode="after")
    def _check_bounds(self) -> "Threshold":
        if self.min > self.max:
            raise ValueError(f"threshold min ({self.min}) exceeds max ({self.max})")
        return self


class ThresholdConfig(FrozenCamelModel):
    """Score bands for threshold scoring."""
    thresholds: list[Threshold] = Field(..., min_length=1)


class _QuestionScoringBase(FrozenCamelModel):
    weight: float = Field(..., ge=0, description="Importance within the pillar")
    max_score: float = Field(..., gt=0)


class LinearScoring(_QuestionScoringBase):
    scoring_function: Literal["linear"] = "linear"


class ExponentialScoring(_QuestionScoringBase):
    scoring_function: Literal["exponential"] = "exponential"
    exponential_config: ExponentialConfig

    @model_validator(mode="after")
    def _check_constant(self) -> "ExponentialScoring":
        if self.exponential_config.normalizing_constant <= 0:
            raise ValueError("exponential base ** multiplier + offset must be positive")
        return self


class ThresholdScoring(_QuestionScoringBase):
    scoring_function: Literal["threshold"] = "threshold"
    threshold_config: ThresholdConfig

    @model_validator(mode="after")
    def _check_scores(self) -> "ThresholdScoring":
        for band in self.threshold_config.thresholds:
            if not 0 <= band.score <= self.max_score:
                raise ValueError(
                    f"threshold score {band.score} outside [0, {self.max_score}]"
                )
        return self


class WeightedScoring(_QuestionScoringBase):
    scoring_function: Literal["weighted"] = "weighted"


def _scoring_function_tag(value: Any) -> Optional[str]:
    if isinstance(value, dict):
        tag = value.get("scoring_function", value.get("scoringFunction"))
    else:
        tag = getattr(value, "scoring_function", None)
    if isinstance(tag, ScoringFunction):
        return tag.value
    return tag


QuestionScoringConfig = Annotated[
    Union[
        Annotated[LinearScoring, Tag("linear")],
        Annotated[ExponentialScoring, Tag("exponential")],
        Annotated[ThresholdScoring, Tag("threshold")],
        Annotated[WeightedScoring, Tag("weighted")],
    ],
    Discriminator(
        _scoring_function_tag,
        custom_error_type="unknown_scoring_function",
        custom_error_message="Unknown or missing scoring function "
                             "(expected linear, exponential, threshold or weighted)",
    ),
]


class PillarScoringConfig(FrozenCamelModel):
    """Weight of a pillar and the scoring config of each of its questions."""
    weight: float = Field(..., ge=0)
    questions: dict[str, QuestionScoringConfig] = Field(default_factory=dict)


class ScoringConfig(FrozenCamelModel):
    """A complete, versioned scoring configuration.

    Swapped as a whole unit; never merged field by field.
    """
    version: str
    max_total_score: float = Field(..., gt=0, description="Informational ceiling")
    pillars: dict[str, PillarScoringConfig] = Field(default_factory=dict)

    @field_validator("version")
    @classmethod
    def _version_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("version must not be empty")
        return v


# =============================================================================
# Results
# =============================================================================


class ScoreResult(CamelModel):
    """Score of a single question."""
    question_id: str
    raw_value: Any = None
    normalized_value: Any = 0
    score: float
    max_score: float
    pillar: str


class PillarScore(CamelModel):
    """Weighted score of one pillar."""
    pillar: str
    score: float
    max_score: float
    percentage: float
    question_scores: list[ScoreResult] = Field(default_factory=list)


class TotalScore(CamelModel):
    """Weighted score across all pillars, tied to the config version used."""
    total_score: float
    max_total_score: float
    percentage: float
    pillar_scores: list[PillarScore] = Field(default_factory=list)
    calculated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    version: str

    def pillar(self, name: str) -> Optional[PillarScore]:
        return next((p for p in self.pillar_scores if p.pillar == name), None)


class ScoringPreview(CamelModel):
    """Progress and potential-score summary for the wizard."""
    current_score: TotalScore
    potential_score: float
    progress_percentage: int
    completed_questions: int
    total_questions: int
    missing_critical_questions: list[str] = Field(default_factory=list)
    current_step: Optional[int] = None
