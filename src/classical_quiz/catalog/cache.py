"""In-memory catalog of music pieces for the active language."""

from __future__ import annotations

import logging
import random
from typing import Callable, Optional, Sequence

from .composers import ComposerKey, normalize
from .fetcher import CatalogFetchError, CatalogFetcher
from .models import (
    DEFAULT_LANGUAGE,
    SUPPORTED_LANGUAGES,
    CatalogError,
    Piece,
    is_supported_language,
)
from .preferences import LanguagePreferenceStore

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "all"

LanguageListener = Callable[[str], None]


class CatalogCache:
    """Holds the loaded pieces and offers lookup and sampling.

    The collection is only ever replaced wholesale: a successful fetch swaps
    in the new tuple, a failed one records :attr:`error` and keeps whatever
    was loaded before. Readers may hold on to :attr:`pieces` safely.
    """

    def __init__(
        self,
        fetcher: CatalogFetcher,
        *,
        preferences: Optional[LanguagePreferenceStore] = None,
        language: Optional[str] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._fetcher = fetcher
        self._preferences = preferences
        self._rng = rng or random.Random()
        self._listeners: list[LanguageListener] = []
        self._by_id: dict[str, Piece] = {}
        self.pieces: tuple[Piece, ...] = ()
        self.loading = False
        self.error: Optional[CatalogError] = None
        if language is not None:
            self.language = _require_language(language)
        elif preferences is not None:
            self.language = preferences.load()
        else:
            self.language = DEFAULT_LANGUAGE

    def add_listener(self, callback: LanguageListener) -> None:
        """Register ``callback(language)`` to run after a language switch."""

        self._listeners.append(callback)

    def remove_listener(self, callback: LanguageListener) -> None:
        """Unregister ``callback``; unknown callbacks are ignored."""

        try:
            self._listeners.remove(callback)
        except ValueError:
            pass

    def replace(self, pieces: Sequence[Piece]) -> None:
        """Swap in a new collection (used by loads and by embedders)."""

        snapshot = tuple(pieces)
        self._by_id = {piece.id: piece for piece in snapshot}
        self.pieces = snapshot

    def load(self, force: bool = False) -> bool:
        """Fetch pieces for the current language.

        Returns ``True`` when the catalog is usable afterwards. Fetch
        failures are recorded on :attr:`error` and never raised.
        """

        if self.pieces and not force:
            return True

        language = self.language
        self.loading = True
        self.error = None
        try:
            fetched = self._fetcher.fetch(language)
        except CatalogFetchError as exc:
            self.error = CatalogError(exc.kind, str(exc), language)
            logger.error(
                "Catalog load failed",
                extra={"language": language, "kind": exc.kind},
            )
            return False
        finally:
            self.loading = False

        self.replace(fetched)
        logger.info(
            "Catalog loaded",
            extra={"language": language, "pieces": len(fetched)},
        )
        return True

    def set_language(self, language: str) -> bool:
        """Switch language, persist it, reload and notify listeners.

        Returns ``False`` when ``language`` is already active.
        """

        language = _require_language(language)
        if language == self.language:
            return False
        previous = self.language
        self.language = language
        if self._preferences is not None:
            self._preferences.save(language)
        logger.info(
            "Catalog language changed",
            extra={"from": previous, "to": language},
        )
        self.load(force=True)
        for callback in list(self._listeners):
            callback(language)
        return True

    def get_by_id(self, piece_id: str) -> Optional[Piece]:
        return self._by_id.get(piece_id)

    def sample_random(
        self, count: int, exclude_id: Optional[str] = None
    ) -> list[Piece]:
        """Up to ``count`` distinct pieces, uniformly without replacement."""

        pool = [piece for piece in self.pieces if piece.id != exclude_id]
        return self._rng.sample(pool, max(0, min(count, len(pool))))

    def filter_by_composer(self, category: ComposerKey) -> list[Piece]:
        """Pieces whose normalized composer equals ``category``."""

        if category == ALL_CATEGORIES:
            return list(self.pieces)
        return [
            piece for piece in self.pieces if normalize(piece.composer) == category
        ]


def _require_language(language: str) -> str:
    if not is_supported_language(language):
        expected = ", ".join(SUPPORTED_LANGUAGES)
        raise ValueError(
            f"Unsupported language '{language}'. Expected one of: {expected}."
        )
    return language
