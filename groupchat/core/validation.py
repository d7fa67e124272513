"""
Input checks shared by the services.

Every helper raises ValidationError with a message that can be shown to the
client as-is.
"""

import re
from datetime import datetime, timezone
from typing import Tuple

from dateutil import parser as date_parser

from groupchat.core.exceptions import ValidationError

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 20
GROUP_NAME_MIN_LENGTH = 3
GROUP_NAME_MAX_LENGTH = 50
MESSAGE_MAX_LENGTH = 1000

_USERNAME_PATTERN = re.compile(r"[A-Za-z0-9_]+")


def validate_username(username: str) -> str:
    if not username or not (USERNAME_MIN_LENGTH <= len(username) <= USERNAME_MAX_LENGTH):
        raise ValidationError(
            f"Username must be between {USERNAME_MIN_LENGTH} and {USERNAME_MAX_LENGTH} characters"
        )
    if not _USERNAME_PATTERN.fullmatch(username):
        raise ValidationError("Username may only contain letters, numbers, and underscores")
    return username


def validate_group_name(name: str) -> str:
    if not name or not (GROUP_NAME_MIN_LENGTH <= len(name) <= GROUP_NAME_MAX_LENGTH):
        raise ValidationError(
            f"Group name must be between {GROUP_NAME_MIN_LENGTH} and {GROUP_NAME_MAX_LENGTH} characters"
        )
    return name


def validate_message_content(content: str) -> str:
    if not content or len(content) > MESSAGE_MAX_LENGTH:
        raise ValidationError(
            f"Message content must not be empty and at most {MESSAGE_MAX_LENGTH} characters"
        )
    return content


def parse_timestamp(value: str) -> datetime:
    """Parse a client supplied date/time into a naive UTC datetime.

    Values without an offset are taken to be UTC already, which is how the
    store records its own timestamps.
    """
    if not value or not value.strip():
        raise ValidationError(f"Invalid timestamp format: {value!r}")
    try:
        parsed = date_parser.parse(value)
    except (ValueError, OverflowError) as e:
        raise ValidationError(f"Invalid timestamp format: {value}") from e
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def clamp_pagination(limit: int, offset: int, max_limit: int = 1000) -> Tuple[int, int]:
    """Force limit into [1, max_limit] and offset to at least 0."""
    return max(1, min(max_limit, limit)), max(0, offset)
