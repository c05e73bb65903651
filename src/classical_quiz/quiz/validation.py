"""Nickname checks applied before a quiz is configured."""

from __future__ import annotations

import re
from enum import Enum
from typing import Optional

MAX_NICKNAME_LENGTH = 20

_DISALLOWED = re.compile(r"[<>&\"'`\x00-\x1f\x7f]")


class NicknameError(Enum):
    REQUIRED = "Please enter a nickname."
    TOO_LONG = f"Nickname must be {MAX_NICKNAME_LENGTH} characters or less."
    INVALID_CHARS = "Nickname contains invalid characters."


class InvalidNicknameError(ValueError):
    """Raised by :func:`require_valid_nickname`."""

    def __init__(self, reason: NicknameError) -> None:
        super().__init__(reason.value)
        self.reason = reason


def validate_nickname(raw: Optional[str]) -> Optional[NicknameError]:
    name = (raw or "").strip()
    if not name:
        return NicknameError.REQUIRED
    if len(name) > MAX_NICKNAME_LENGTH:
        return NicknameError.TOO_LONG
    if _DISALLOWED.search(name):
        return NicknameError.INVALID_CHARS
    return None


def require_valid_nickname(raw: Optional[str]) -> str:
    """Return the trimmed nickname or raise :class:`InvalidNicknameError`."""

    reason = validate_nickname(raw)
    if reason is not None:
        raise InvalidNicknameError(reason)
    return (raw or "").strip()
