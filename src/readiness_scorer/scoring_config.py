"""Scoring Configuration provider.

Built-in scoring presets, preset selection, and the validation used by
every path that installs a configuration (engine construction, hot-reload
from a file, and the admin ``validate`` command), so structural errors are
reported identically everywhere.
"""

import copy
import logging
from pathlib import Path
from typing import Any, Mapping, Union

from pydantic import ValidationError

from .catalog import QuestionCatalog
from .config import read_document
from .exceptions import ConfigValidationError
from .schema import QuestionType, ScoringConfig

logger = logging.getLogger(__name__)


# =============================================================================
# Presets
# =============================================================================


def _question(weight: float, function: str = "weighted", max_score: float = 10, **extra: Any) -> dict:
    return {"weight": weight, "scoring_function": function, "max_score": max_score, **extra}


_DEFAULT_CONFIG_DATA: dict[str, Any] = {
    "version": "1.0.0",
    "max_total_score": 100,
    "pillars": {
        "business_readiness": {
            "weight": 0.25,
            "questions": {
                "company_size": _question(0.2),
                "industry": _question(0.15),
                "current_ai_usage": _question(0.3, "linear"),
                "executive_sponsor": _question(0.15, "linear"),
            },
        },
        "technical_readiness": {
            "weight": 0.35,
            "questions": {
                "tech_stack_maturity": _question(0.3, "linear"),
                "api_architecture": _question(0.25),
                "cloud_infrastructure": _question(0.2),
                "data_infrastructure": _question(0.25),
                "version_control": _question(0.2),
                "testing_practices": _question(0.15),
                "code_quality": _question(0.15, "linear"),
                "automated_test_coverage": _question(0.1, "linear"),
            },
        },
        "security_readiness": {
            "weight": 0.2,
            "questions": {
                "security_practices": _question(0.4),
                "compliance_requirements": _question(0.3, "linear"),
                "data_sensitivity": _question(0.3),
            },
        },
        "operational_readiness": {
            "weight": 0.2,
            "questions": {
                "monitoring_capabilities": _question(0.4),
                "deployment_automation": _question(0.3),
                "incident_response": _question(0.3, "linear"),
            },
        },
    },
}


def _derived_config_data(version: str, pillar_weights: Mapping[str, float],
                         question_overrides: Mapping[str, Mapping[str, dict]]) -> dict:
    data = copy.deepcopy(_DEFAULT_CONFIG_DATA)
    data["version"] = version
    for pillar, weight in pillar_weights.items():
        data["pillars"][pillar]["weight"] = weight
    for pillar, questions in question_overrides.items():
        data["pillars"][pillar]["questions"].update(copy.deepcopy(questions))
    return data


DEFAULT_SCORING_CONFIG = ScoringConfig.model_validate(_DEFAULT_CONFIG_DATA)

# Higher emphasis on security and compliance for enterprises
ENTERPRISE_SCORING_CONFIG = ScoringConfig.model_validate(_derived_config_data(
    "1.0.0-enterprise",
    {"security_readiness": 0.3},
    {"security_readiness": {
        "compliance_requirements": _question(0.5, "threshold", threshold_config={
            "thresholds": [
                {"min": 0, "max": 0, "score": 2},
                {"min": 1, "max": 2, "score": 6},
                {"min": 3, "max": 10, "score": 10},
            ],
        }),
    }},
))

# Higher emphasis on AI adoption, lighter security expectations for startups
STARTUP_SCORING_CONFIG = ScoringConfig.model_validate(_derived_config_data(
    "1.0.0-startup",
    {"business_readiness": 0.35, "security_readiness": 0.15},
    {"business_readiness": {
        "current_ai_usage": _question(0.5, "exponential", exponential_config={
            "base": 2,
            "multiplier": 1.5,
        }),
    }},
))

PRESETS: dict[str, ScoringConfig] = {
    "default": DEFAULT_SCORING_CONFIG,
    "enterprise": ENTERPRISE_SCORING_CONFIG,
    "startup": STARTUP_SCORING_CONFIG,
}

ENTERPRISE_INDUSTRIES = {"finance", "healthcare"}


def select_scoring_config(answers: Mapping[str, Any]) -> ScoringConfig:
    """Pick a preset from organization characteristics in the answers."""
    company_size = answers.get("company_size")
    industry = answers.get("industry")

    if company_size == "enterprise" or industry in ENTERPRISE_INDUSTRIES:
        return ENTERPRISE_SCORING_CONFIG
    if company_size == "startup":
        return STARTUP_SCORING_CONFIG
    return DEFAULT_SCORING_CONFIG


def get_preset(name: str) -> ScoringConfig:
    """Get a built-in preset by name."""
    try:
        return PRESETS[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown preset {name!r}; expected one of {', '.join(PRESETS)}") from None


# =============================================================================
# Validation
# =============================================================================


def _format_error(error: dict) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()))
    return f"{location}: {error['msg']}" if location else error["msg"]


def parse_scoring_config(data: Union[ScoringConfig, Mapping[str, Any]]) -> ScoringConfig:
    """Parse raw configuration data into a ScoringConfig.

    Raises:
        ConfigValidationError: If the structure is invalid, with one issue
            per pydantic error.
    """
    if isinstance(data, ScoringConfig):
        return data
    if not isinstance(data, Mapping):
        raise ConfigValidationError([f"expected a mapping, got {type(data).__name__}"])
    try:
        return ScoringConfig.model_validate(dict(data))
    except ValidationError as e:
        version = data.get("version") if isinstance(data.get("version"), str) else None
        raise ConfigValidationError([_format_error(err) for err in e.errors()], version) from e


def check_scoring_config(config: ScoringConfig, catalog: QuestionCatalog) -> list[str]:
    """Check a parsed configuration against the question catalog.

    Returns:
        A list of human-readable invariant violations, empty when valid.
    """
    issues = []

    for pillar_name, pillar in config.pillars.items():
        for question_id, question_config in pillar.questions.items():
            where = f"pillars.{pillar_name}.questions.{question_id}"
            question = catalog.find_question(question_id)
            if question is None:
                issues.append(f"{where}: question not found in catalog")
                continue

            if question.pillar != pillar_name:
                issues.append(
                    f"{where}: question belongs to pillar {question.pillar!r}, not {pillar_name!r}"
                )

            function = question_config.scoring_function
            if question.is_select and function != "weighted":
                issues.append(f"{where}: {question.type.value} questions require weighted scoring, "
                              f"got {function}")
            elif function == "weighted" and not question.is_select:
                issues.append(f"{where}: weighted scoring requires a select question, "
                              f"got {question.type.value}")
            elif function == "weighted" and not any((opt.weight or 0) > 0 for opt in question.options):
                issues.append(f"{where}: weighted scoring requires at least one option with a positive weight")

            if question.type == QuestionType.TEXT_INPUT:
                issues.append(f"{where}: text_input questions cannot be scored")

    return issues


def validate_scoring_config(
    data: Union[ScoringConfig, Mapping[str, Any]],
    catalog: QuestionCatalog,
) -> ScoringConfig:
    """Parse and fully validate a scoring configuration.

    Raises:
        ConfigValidationError: If the configuration is structurally invalid
            or inconsistent with the catalog.
    """
    config = parse_scoring_config(data)
    issues = check_scoring_config(config, catalog)
    if issues:
        raise ConfigValidationError(issues, config.version)
    return config


def load_scoring_config(path: Union[str, Path], catalog: QuestionCatalog) -> ScoringConfig:
    """Load and validate a scoring configuration from a YAML or JSON file.

    Raises:
        ConfigValidationError: If the file cannot be read or is invalid.
    """
    path = Path(path)
    try:
        data = read_document(path)
    except (OSError, ValueError) as e:
        raise ConfigValidationError([str(e)]) from e

    config = validate_scoring_config(data, catalog)
    logger.info("Loaded scoring config %s from %s", config.version, path)
    return config
