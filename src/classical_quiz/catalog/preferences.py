"""Persisted language preference, the only state kept between sessions."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from .models import DEFAULT_LANGUAGE, SUPPORTED_LANGUAGES, is_supported_language

logger = logging.getLogger(__name__)

PREFERENCES_FILENAME = "preferences.json"
LANGUAGE_KEY = "language"


class LanguagePreferenceStore:
    """JSON key-value file holding the ``language`` preference."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    @classmethod
    def in_directory(cls, directory: Path) -> "LanguagePreferenceStore":
        return cls(Path(directory) / PREFERENCES_FILENAME)

    def load(self) -> str:
        value = self._read().get(LANGUAGE_KEY)
        if is_supported_language(value):
            return value
        if value is not None:
            logger.info(
                "Ignoring unsupported stored language",
                extra={"stored": value, "path": self.path},
            )
        return DEFAULT_LANGUAGE

    def save(self, language: str) -> None:
        if not is_supported_language(language):
            expected = ", ".join(SUPPORTED_LANGUAGES)
            raise ValueError(
                f"Unsupported language '{language}'. Expected one of: {expected}."
            )
        data = self._read()
        data[LANGUAGE_KEY] = language
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(data, ensure_ascii=False, indent=2) + "\n",
            encoding="utf-8",
        )

    def _read(self) -> dict[str, object]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(
                "Preferences file is not valid JSON; using defaults",
                extra={"path": self.path},
            )
            return {}
        return data if isinstance(data, dict) else {}
