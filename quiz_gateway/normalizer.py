# quiz_gateway/normalizer.py
"""
Turns an untrusted model reply into a Quiz.

The envelope is strict: the reply must be JSON holding a `questions`
list, otherwise MalformedReplyError is raised. Individual
questions are lenient: every missing or sloppy field is repaired with a
default and the question is kept, in input order.
"""

import json
import logging
import re
from typing import Any, List, Mapping, Union
from urllib.parse import quote

from quiz_gateway.errors import MalformedReplyError
from quiz_gateway.schemas import Question, Quiz

logger = logging.getLogger(__name__)

IMAGE_URL_TEMPLATE = "https://image.pollinations.ai/prompt/{keyword}?width=800&height=600&nologo=true"
EXPECTED_OPTION_COUNT = 4
MAX_ANSWER_INDEX = EXPECTED_OPTION_COUNT - 1

# A fence line: ``` optionally followed by "json", at the very start or end of the reply.
_OPENING_FENCE_RE = re.compile(r"\A```(?:json)?[ \t]*(?:\r?\n)?", re.IGNORECASE)
_CLOSING_FENCE_RE = re.compile(r"(?:\r?\n)?[ \t]*```\s*\Z")

# Characters encodeURIComponent leaves alone, on top of quote()'s always-safe set.
_URI_COMPONENT_SAFE = "!'()*~"


def strip_code_fences(raw: str) -> str:
    """Remove a leading and/or trailing markdown code fence and trim.

    Works with or without the newline after the fence, and on replies that
    only have one of the two fences. Text without fences only gets trimmed.
    """
    text = raw.strip()
    text = _OPENING_FENCE_RE.sub("", text, count=1)
    text = _CLOSING_FENCE_RE.sub("", text, count=1)
    return text.strip()


def parse_envelope(cleaned: str) -> List[Any]:
    """Parse the cleaned reply and return its `questions` list."""
    try:
        data = json.loads(cleaned)
    except ValueError as e:
        raise MalformedReplyError(f"Model reply is not valid JSON: {e}", raw_reply=cleaned) from e

    if not isinstance(data, dict):
        raise MalformedReplyError(
            f"Invalid quiz structure: expected a JSON object, got {type(data).__name__}", raw_reply=cleaned
        )
    questions = data.get("questions")
    if not isinstance(questions, list):
        raise MalformedReplyError("Invalid quiz structure: missing questions array", raw_reply=cleaned)
    return questions


def build_image_url(keyword: str) -> str:
    return IMAGE_URL_TEMPLATE.format(keyword=quote(keyword, safe=_URI_COMPONENT_SAFE))


def _text(value: Any, default: str) -> str:
    if not value:
        return default
    return value if isinstance(value, str) else str(value)


def _options(value: Any, index: int) -> List[str]:
    if not value:
        return []
    if not isinstance(value, list):
        logger.warning("Question %d: options is a %s, not a list; dropping it", index + 1, type(value).__name__)
        return []
    options = [o if isinstance(o, str) else str(o) for o in value]
    if len(options) != EXPECTED_OPTION_COUNT:
        logger.warning("Question %d has %d options, expected %d", index + 1, len(options), EXPECTED_OPTION_COUNT)
    return options


def _correct_answer(value: Any, index: int) -> int:
    # absent or null defaults to 0; an explicit 0 stays 0
    if value is None:
        return 0

    answer: Union[int, None] = None
    if isinstance(value, int) and not isinstance(value, bool):
        answer = value
    elif isinstance(value, float) and value.is_integer():
        answer = int(value)
    elif isinstance(value, str):
        stripped = value.strip()
        if re.fullmatch(r"-?\d+", stripped):
            answer = int(stripped)
        elif len(stripped) == 1 and stripped.upper() in "ABCD":
            answer = "ABCD".index(stripped.upper())

    if answer is None:
        logger.warning("Question %d: unusable correctAnswer %r, using 0", index + 1, value)
        return 0
    if not 0 <= answer <= MAX_ANSWER_INDEX:
        clamped = min(max(answer, 0), MAX_ANSWER_INDEX)
        logger.warning("Question %d: correctAnswer %d out of range, clamped to %d", index + 1, answer, clamped)
        return clamped
    return answer


def _question_id(value: Any, index: int) -> Union[int, str]:
    # truthy check: 0, "" and missing all fall back to the 1-based position
    if value and isinstance(value, (int, str)) and not isinstance(value, bool):
        return value
    return index + 1


def _image_url(item: Mapping[str, Any]) -> Union[str, None]:
    image_url = item.get("imageUrl")
    if image_url and isinstance(image_url, str):
        return image_url
    keyword = item.get("visual_keyword")
    if keyword and isinstance(keyword, str):
        return build_image_url(keyword)
    return None


def normalize_question(item: Any, index: int, fallback_difficulty: str, fallback_topic: str) -> Question:
    """Repair one question field by field. Never raises for bad content."""
    if not isinstance(item, Mapping):
        logger.warning("Question %d is a %s, not an object; using defaults", index + 1, type(item).__name__)
        item = {}

    return Question(
        id=_question_id(item.get("id"), index),
        question=_text(item.get("question"), ""),
        options=_options(item.get("options"), index),
        correctAnswer=_correct_answer(item.get("correctAnswer"), index),
        explanation=_text(item.get("explanation"), ""),
        difficulty=_text(item.get("difficulty"), fallback_difficulty),
        topic=_text(item.get("topic"), fallback_topic),
        imageUrl=_image_url(item),
    )


def normalize(raw_reply: str, fallback_difficulty: str, fallback_topic: str) -> Quiz:
    """Clean, parse and repair a raw model reply into a Quiz.

    Args:
        raw_reply: Text returned by the model, possibly fenced
        fallback_difficulty: Used for questions without a difficulty
        fallback_topic: Used for questions without a topic

    Raises:
        MalformedReplyError: reply is not JSON, or has no `questions` list
    """
    cleaned = strip_code_fences(raw_reply)
    try:
        items = parse_envelope(cleaned)
    except MalformedReplyError as e:
        logger.warning("Rejected model reply (%s). Raw reply: %.500s", e.message, raw_reply)
        raise

    questions = [
        normalize_question(item, index, fallback_difficulty, fallback_topic) for index, item in enumerate(items)
    ]
    return Quiz(questions=questions)
