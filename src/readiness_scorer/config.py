"""Centralized settings management for the readiness scoring engine."""

import json
import os
from pathlib import Path
from typing import Any, Iterator, Optional

import yaml
from pydantic import BaseModel, Field

SETTINGS_ENV_VAR = "READINESS_SCORER_CONFIG"
SETTINGS_FILENAMES = ("readiness-scorer.yaml", "readiness-scorer.yml")


class PreviewSettings(BaseModel):
    """Policy knobs for the scoring preview."""
    critical_weight_threshold: float = Field(
        0.3,
        ge=0,
        description="Unanswered required questions weighted above this are flagged as critical"
    )
    count_unknown_answers: bool = Field(
        True,
        description="Count every answer key as completed, including ids missing from the catalog"
    )


class NormalizationSettings(BaseModel):
    """Defaults used when a question carries no validation range."""
    number_input_default_max: float = Field(
        100.0,
        gt=0,
        description="Upper bound of the assumed 0..N range for unranged number inputs"
    )


class SourceSettings(BaseModel):
    """Where the engine loads its catalog and initial scoring config from."""
    catalog_path: Optional[Path] = Field(
        None,
        description="Question catalog file (YAML or JSON). Defaults to the bundled catalog"
    )
    scoring_config_path: Optional[Path] = Field(
        None,
        description="Scoring config file (YAML or JSON). Defaults to the built-in default preset"
    )


class EngineSettings(BaseModel):
    """Complete settings for the readiness scoring engine."""
    preview: PreviewSettings = Field(default_factory=PreviewSettings)
    normalization: NormalizationSettings = Field(default_factory=NormalizationSettings)
    sources: SourceSettings = Field(default_factory=SourceSettings)


# Global settings instance
_settings: Optional[EngineSettings] = None


def get_settings() -> EngineSettings:
    """Get the current settings.

    Returns the global settings, initializing with defaults if not yet loaded.
    """
    global _settings
    if _settings is None:
        _settings = EngineSettings()
    return _settings


def load_settings(path: Path) -> EngineSettings:
    """Load settings from a YAML or JSON file and make them the global settings."""
    global _settings
    _settings = EngineSettings.model_validate(read_document(path) or {})
    return _settings


def reset_settings() -> None:
    """Drop any loaded settings file and fall back to defaults."""
    global _settings
    _settings = EngineSettings()


def _settings_candidates() -> Iterator[Path]:
    env_path = os.environ.get(SETTINGS_ENV_VAR)
    if env_path:
        yield Path(env_path)
    for name in SETTINGS_FILENAMES:
        yield Path(name)
    yield Path.home() / ".config" / "readiness-scorer" / "config.yaml"


def find_settings_file() -> Optional[Path]:
    """First existing settings file: $READINESS_SCORER_CONFIG, then the
    current directory, then ~/.config/readiness-scorer/config.yaml."""
    return next((path for path in _settings_candidates() if path.exists()), None)


def save_default_settings(path: Path) -> None:
    """Save the default settings to a YAML file.

    Args:
        path: Path where to save the settings.
    """
    data = EngineSettings().model_dump(mode="json")

    yaml_content = """# Readiness Scorer Settings
# =========================
#
# Policy constants for the scoring preview and answer normalization,
# plus optional catalog / scoring config sources.
#
# Copy this file to one of these locations:
#   - ./readiness-scorer.yaml (current directory)
#   - ~/.config/readiness-scorer/config.yaml (user config)
#
# Or set the READINESS_SCORER_CONFIG environment variable.

"""
    yaml_content += yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        f.write(yaml_content)


def read_document(path: Path) -> Any:
    """Read a YAML or JSON document, choosing the parser by file extension.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the content cannot be parsed.
    """
    path = Path(path)
    with open(path, 'r', encoding='utf-8') as f:
        text = f.read()

    if path.suffix.lower() == ".json":
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}") from e

    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e
