"""Composer-name normalization.

Catalog text is language dependent, so the same composer appears under
several spellings. Category filtering compares canonical keys produced by
:func:`normalize`. New spellings are added to :data:`COMPOSER_ALIASES`.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Mapping

ComposerKey = str

COMPOSER_ALIASES: Mapping[str, ComposerKey] = MappingProxyType(
    {
        "Beethoven": "Beethoven",
        "ベートーヴェン": "Beethoven",
        "Mozart": "Mozart",
        "モーツァルト": "Mozart",
        "Bach": "Bach",
        "バッハ": "Bach",
        "Chopin": "Chopin",
        "ショパン": "Chopin",
        "Tchaikovsky": "Tchaikovsky",
        "チャイコフスキー": "Tchaikovsky",
        "Vivaldi": "Vivaldi",
        "ヴィヴァルディ": "Vivaldi",
        "Brahms": "Brahms",
        "ブラームス": "Brahms",
        "Pachelbel": "Pachelbel",
        "パッヘルベル": "Pachelbel",
    }
)


def normalize(raw: str) -> ComposerKey:
    """Map a composer spelling to its key; unknown text passes through."""

    return COMPOSER_ALIASES.get(raw, raw)


def known_composers() -> tuple[ComposerKey, ...]:
    """Canonical keys in first-seen table order."""

    return tuple(dict.fromkeys(COMPOSER_ALIASES.values()))


def composer_keys(raw_names: Iterable[str]) -> list[ComposerKey]:
    """Distinct keys present in ``raw_names`` in first-seen order."""

    return list(dict.fromkeys(normalize(name) for name in raw_names))
