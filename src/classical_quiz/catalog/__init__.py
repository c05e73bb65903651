"""Music catalog loading, lookup and sampling."""

from .cache import ALL_CATEGORIES, CatalogCache
from .composers import COMPOSER_ALIASES, ComposerKey, known_composers, normalize
from .fetcher import CatalogFetcher, CatalogFetchError, parse_pieces
from .models import (
    DEFAULT_LANGUAGE,
    SUPPORTED_LANGUAGES,
    CatalogError,
    CatalogErrorKind,
    CatalogFormatError,
    Piece,
)
from .preferences import LanguagePreferenceStore

__all__ = [
    "ALL_CATEGORIES",
    "CatalogCache",
    "COMPOSER_ALIASES",
    "ComposerKey",
    "known_composers",
    "normalize",
    "CatalogFetcher",
    "CatalogFetchError",
    "parse_pieces",
    "DEFAULT_LANGUAGE",
    "SUPPORTED_LANGUAGES",
    "CatalogError",
    "CatalogErrorKind",
    "CatalogFormatError",
    "Piece",
    "LanguagePreferenceStore",
]
