"""Input validation and sanitization for poll text.

The script-pattern check below is a denylist and is easy to get around
(event handler attributes, encoded payloads, other URL schemes). It stays as
a defense-in-depth supplement; the primary control is that stored text is
escaped and clients render it as text, never as markup.
"""
import re
from typing import Any, List, Optional, Sequence, Tuple

from polly.core.constants import (
    BLOCKED_PATTERNS,
    MAX_OPTION_LENGTH,
    MAX_QUESTION_LENGTH,
    MIN_POLL_OPTIONS,
)
from polly.core.errors import ValidationError

MAX_IDENTIFIER_LENGTH = 64

MISSING_INPUT_MESSAGE = "Please provide a question and at least two options."
QUESTION_TOO_LONG_MESSAGE = f"Question is too long. Maximum {MAX_QUESTION_LENGTH} characters allowed."
OPTION_FORMAT_MESSAGE = "Invalid option format."
OPTION_TOO_LONG_MESSAGE = f"Option text is too long. Maximum {MAX_OPTION_LENGTH} characters allowed."
INVALID_OPTION_CHARS_MESSAGE = "Invalid characters detected in options."
INVALID_QUESTION_CHARS_MESSAGE = "Invalid characters detected in question."


def escape_markup(text: str) -> str:
    """Replace angle brackets with entities and trim surrounding whitespace."""
    return text.replace("<", "&lt;").replace(">", "&gt;").strip()


def contains_blocked_pattern(text: str) -> bool:
    """Case-sensitive substring match against BLOCKED_PATTERNS."""
    return any(pattern in text for pattern in BLOCKED_PATTERNS)


def clean_options(raw_options: Optional[Sequence[Any]]) -> List[Any]:
    """Drop empty entries submitted by blank form inputs."""
    if not raw_options:
        return []
    return [option for option in raw_options if option]


def validate_poll_input(question: Any, options: Sequence[Any]) -> Tuple[str, List[str]]:
    """
    Validate a poll question and its options, returning sanitized copies.

    Rules are checked in order and the first failure wins:
      1. question present and at least two options
      2. question length
      3. each option is text and within the length limit
      4. no blocked script patterns in any option, then in the question

    Args:
        question: The poll question
        options: Option texts, in display order

    Returns:
        (question, options) with angle brackets escaped and whitespace trimmed

    Raises:
        ValidationError: With the message of the first violated rule
    """
    if not question or not isinstance(question, str) or options is None or len(options) < MIN_POLL_OPTIONS:
        raise ValidationError(MISSING_INPUT_MESSAGE)

    if len(question) > MAX_QUESTION_LENGTH:
        raise ValidationError(QUESTION_TOO_LONG_MESSAGE)

    for option in options:
        if not isinstance(option, str):
            raise ValidationError(OPTION_FORMAT_MESSAGE)
        if len(option) > MAX_OPTION_LENGTH:
            raise ValidationError(OPTION_TOO_LONG_MESSAGE)

    for option in options:
        if contains_blocked_pattern(option):
            raise ValidationError(INVALID_OPTION_CHARS_MESSAGE)

    if contains_blocked_pattern(question):
        raise ValidationError(INVALID_QUESTION_CHARS_MESSAGE)

    return escape_markup(question), [escape_markup(option) for option in options]


def validate_identifier(value: Any, label: str = "poll_id") -> str:
    """
    Validate an opaque row id before it is used in a store filter.

    Ids are UUID-style strings; anything else is rejected early so malformed
    input never reaches a query.

    Raises:
        ValidationError: If the id is missing or malformed
    """
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"Missing {label}")

    value = value.strip()

    if len(value) > MAX_IDENTIFIER_LENGTH or not re.match(r'^[A-Za-z0-9_-]+$', value):
        raise ValidationError(f"Invalid {label}")

    return value
