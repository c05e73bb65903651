"""HTTP access to the language-specific catalog documents."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

import requests

from .models import CatalogErrorKind, CatalogFormatError, Piece

logger = logging.getLogger(__name__)

DEFAULT_RESOURCE = "music"
DEFAULT_TIMEOUT = 10.0


class CatalogFetchError(RuntimeError):
    """Raised by :class:`CatalogFetcher` for any failed retrieval."""

    def __init__(self, kind: CatalogErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind


@dataclass
class CatalogFetcher:
    """Fetch ``{base_url}/{resource}.{language}.json`` with ``requests``.

    The ``session`` seam accepts anything exposing ``get(url, timeout=...)``
    so tests and embedding applications can supply their own transport.
    """

    base_url: str
    resource: str = DEFAULT_RESOURCE
    timeout: float = DEFAULT_TIMEOUT
    session: Optional[Any] = None

    def url_for(self, language: str) -> str:
        return f"{self.base_url.rstrip('/')}/{self.resource}.{language}.json"

    def fetch(self, language: str) -> list[Piece]:
        url = self.url_for(language)
        http = self.session or requests
        logger.debug("Fetching catalog", extra={"url": url})
        try:
            response = http.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise CatalogFetchError(CatalogErrorKind.TRANSPORT, str(exc)) from exc

        if not 200 <= response.status_code < 300:
            logger.warning(
                "Catalog request returned HTTP %s",
                response.status_code,
                extra={"url": url, "language": language},
            )
            raise CatalogFetchError(
                CatalogErrorKind.HTTP_STATUS,
                f"Failed to fetch music data for {language}",
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise CatalogFetchError(
                CatalogErrorKind.DECODE,
                f"Invalid catalog JSON for {language}: {exc}",
            ) from exc

        try:
            return parse_pieces(payload)
        except CatalogFormatError as exc:
            raise CatalogFetchError(CatalogErrorKind.DECODE, str(exc)) from exc


def parse_pieces(payload: Any) -> list[Piece]:
    """Convert a decoded JSON array into pieces, rejecting duplicate ids."""

    if not isinstance(payload, Sequence) or isinstance(payload, (str, bytes)):
        raise CatalogFormatError("Catalog payload must be a JSON array.")
    pieces: list[Piece] = []
    seen: set[str] = set()
    for record in payload:
        piece = Piece.from_record(record)
        if piece.id in seen:
            raise CatalogFormatError(f"Duplicate piece id '{piece.id}'.")
        seen.add(piece.id)
        pieces.append(piece)
    return pieces
