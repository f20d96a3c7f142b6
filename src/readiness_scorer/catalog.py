"""Question Catalog provider.

Wraps the static wizard question definitions and offers the two lookups
the scoring engine needs: all questions, and a question by id.
"""

import logging
from importlib import resources
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import ValidationError

from .config import read_document
from .exceptions import CatalogLoadError
from .schema import CatalogDefinition, Question

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_RESOURCE = "questions.yaml"


class QuestionCatalog:
    """Read-only index over the wizard questions of a catalog."""

    def __init__(self, definition: CatalogDefinition):
        self.definition = definition
        self._questions: list[Question] = []
        self._by_id: dict[str, Question] = {}

        for step in sorted(definition.steps, key=lambda s: s.order):
            for question in step.questions:
                if question.id in self._by_id:
                    raise CatalogLoadError(f"Duplicate question id in catalog: {question.id}")
                if question.step_id is None:
                    question = question.model_copy(update={"step_id": step.id})
                self._questions.append(question)
                self._by_id[question.id] = question

    @classmethod
    def from_questions(cls, questions: list[Question], version: str = "1.0.0") -> "QuestionCatalog":
        """Build a single-step catalog from a flat list of questions."""
        step = {"id": "step_1", "title": "Questions", "order": 1, "questions": questions}
        return cls(CatalogDefinition(version=version, steps=[step]))

    @property
    def version(self) -> str:
        return self.definition.version

    def get_all_questions(self) -> list[Question]:
        """All questions across every step, in step order."""
        return list(self._questions)

    def find_question(self, question_id: str) -> Optional[Question]:
        return self._by_id.get(question_id)

    def __contains__(self, question_id: object) -> bool:
        return question_id in self._by_id

    def __len__(self) -> int:
        return len(self._questions)


def parse_catalog(data: Any) -> QuestionCatalog:
    """Validate raw catalog data and build a QuestionCatalog.

    Raises:
        CatalogLoadError: If the data does not describe a valid catalog.
    """
    if not isinstance(data, dict):
        raise CatalogLoadError("Catalog must be a mapping with a 'steps' list")
    try:
        definition = CatalogDefinition.model_validate(data)
    except ValidationError as e:
        raise CatalogLoadError(f"Invalid question catalog: {e}") from e
    return QuestionCatalog(definition)


def load_catalog(path: Union[str, Path]) -> QuestionCatalog:
    """Load a question catalog from a YAML or JSON file.

    Args:
        path: Path to the catalog file.

    Returns:
        The loaded QuestionCatalog.

    Raises:
        CatalogLoadError: If the file is missing or invalid.
    """
    path = Path(path)
    if not path.exists():
        raise CatalogLoadError(f"Catalog file not found: {path}")

    try:
        data = read_document(path)
    except (OSError, ValueError) as e:
        raise CatalogLoadError(str(e)) from e

    catalog = parse_catalog(data)
    logger.info("Loaded question catalog %s (%d questions) from %s",
                catalog.version, len(catalog), path)
    return catalog


def load_default_catalog() -> QuestionCatalog:
    """Load the catalog bundled with the package."""
    resource = resources.files("readiness_scorer") / "data" / DEFAULT_CATALOG_RESOURCE
    text = resource.read_text(encoding="utf-8")
    return parse_catalog(yaml.safe_load(text))
