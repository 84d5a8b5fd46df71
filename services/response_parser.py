"""
Parse and validate raw model text.

Model output is untrusted: it is decoded into plain Python values first and
only projected into Question or Recommendation records once validated.
A quiz batch is all-or-nothing.
"""

import json
import logging
import re
from typing import Any, Dict, List

from pydantic import ValidationError as PydanticValidationError

from models.study_models import Question, Recommendation
from utils.exceptions import MalformedResponseError, ValidationError

logger = logging.getLogger(__name__)

_LEADING_FENCE = re.compile(r"^```[\w-]*[ \t]*\r?\n?")
_TRAILING_FENCE = re.compile(r"\r?\n?```$")


def strip_code_fences(text: str) -> str:
    """Remove surrounding whitespace and leading/trailing ``` or ```json fences."""
    cleaned = (text or "").strip()
    cleaned = _LEADING_FENCE.sub("", cleaned, count=1)
    cleaned = _TRAILING_FENCE.sub("", cleaned, count=1)
    return cleaned.strip()


def parse_json_array(text: str) -> List[Any]:
    """Strip wrapping, decode JSON and require a top-level array."""
    cleaned = strip_code_fences(text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.warning(f"Model returned non-JSON output: {cleaned[:200]!r}")
        raise MalformedResponseError(
            "Model response was not valid JSON",
            context={"position": e.pos, "preview": cleaned[:200]},
        ) from e

    if not isinstance(data, list):
        raise ValidationError(
            "Model response was not a JSON array",
            error_code="INVALID_MODEL_OUTPUT",
            status_code=502,
            context={"type": type(data).__name__},
        )
    return data


def _invalid_question(index: int, reason: str) -> ValidationError:
    return ValidationError(
        f"Invalid question at index {index}: {reason}",
        error_code="INVALID_MODEL_OUTPUT",
        status_code=502,
        context={"index": index, "reason": reason},
    )


def parse_quiz_questions(text: str) -> List[Question]:
    """
    Parse a quiz batch. Every item needs non-empty `question`, exactly four
    `options` and an integer `correctAnswer` in [0, 3].
    """
    items = parse_json_array(text)
    if not items:
        raise ValidationError(
            "Model returned no questions",
            error_code="INVALID_MODEL_OUTPUT",
            status_code=502,
        )

    questions: List[Question] = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise _invalid_question(index, "not an object")
        try:
            questions.append(Question.model_validate(item))
        except PydanticValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(part) for part in first.get("loc", ())) or "item"
            raise _invalid_question(index, f"{field}: {first.get('msg')}") from e

    return questions


def parse_recommendations(text: str) -> List[Dict[str, Any]]:
    """
    Recommendations only need to be an array; the UI defaults missing
    category/priority. Entries that are not objects, or whose known fields
    are not strings, carry nothing renderable and are dropped.
    """
    items = parse_json_array(text)
    recommendations = []
    for item in items:
        if not isinstance(item, dict):
            continue
        try:
            recommendations.append(Recommendation.model_validate(item).model_dump(exclude_none=True))
        except PydanticValidationError:
            continue
    if len(recommendations) != len(items):
        logger.warning(f"Dropped {len(items) - len(recommendations)} unusable recommendation entries")
    return recommendations
