"""Catalog record types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

SUPPORTED_LANGUAGES: tuple[str, ...] = ("ja", "en")
DEFAULT_LANGUAGE = "ja"


class CatalogFormatError(RuntimeError):
    """Raised when a catalog payload does not describe music pieces."""


@dataclass(frozen=True)
class Piece:
    """One catalog entry; immutable once loaded."""

    id: str
    title: str
    composer: str
    genre: str = ""
    audio_url: str = ""
    description: str = ""
    trivia: str = ""

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Piece":
        if not isinstance(record, Mapping):
            raise CatalogFormatError(
                f"Piece record must be an object, got {type(record).__name__}."
            )
        identifier = record.get("id")
        if identifier is None or not str(identifier).strip():
            raise CatalogFormatError("Piece record is missing an 'id'.")
        return cls(
            id=str(identifier),
            title=_text(record, "title"),
            composer=_text(record, "composer"),
            genre=_text(record, "genre"),
            audio_url=_text(record, "audio_url"),
            description=_text(record, "description"),
            trivia=_text(record, "trivia"),
        )

    def to_record(self) -> dict[str, str]:
        return {
            "id": self.id,
            "title": self.title,
            "composer": self.composer,
            "genre": self.genre,
            "audio_url": self.audio_url,
            "description": self.description,
            "trivia": self.trivia,
        }


class CatalogErrorKind(Enum):
    """Enumerable causes of a failed catalog fetch."""

    HTTP_STATUS = "http_status"
    TRANSPORT = "transport"
    DECODE = "decode"


@dataclass(frozen=True)
class CatalogError:
    """Recoverable fetch failure recorded on the cache."""

    kind: CatalogErrorKind
    message: str
    language: str

    def __str__(self) -> str:
        return self.message


def is_supported_language(value: object) -> bool:
    return isinstance(value, str) and value in SUPPORTED_LANGUAGES


def _text(record: Mapping[str, Any], key: str) -> str:
    value = record.get(key)
    return "" if value is None else str(value)
