"""Configuration loader for classical-quiz.

Values resolve with precedence CLI overrides > ``CLASSICAL_QUIZ_*``
environment variables > ``classical_quiz.toml`` > built-in defaults.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

from .core import config as core_config
from .core import workspace as workspace_mod
from .quiz.models import QuestionCount, QuizFormat, parse_question_count

CONFIG_FILENAME = "classical_quiz.toml"
CONFIG_ENV = "CLASSICAL_QUIZ_CONFIG"
ENV_PREFIX = "CLASSICAL_QUIZ_"

CONFIG_TEMPLATE = """\
# classical-quiz configuration

[catalog]
# Host serving <resource>.<language>.json documents
base_url = "http://localhost:5173"
resource = "music"
timeout_seconds = 10.0

[ranking]
base_url = "http://localhost:5173"
timeout_seconds = 10.0

[quiz]
# audio-to-title, title-to-composer or title-to-track
default_format = "audio-to-title"
# a positive integer or "all"
default_count = 5

[logging]
level = "INFO"
verbose = false
"""

DEFAULTS: Mapping[str, Mapping[str, Any]] = {
    "catalog": {
        "base_url": "http://localhost:5173",
        "resource": "music",
        "timeout_seconds": 10.0,
    },
    "ranking": {
        "base_url": "http://localhost:5173",
        "timeout_seconds": 10.0,
    },
    "quiz": {"default_format": "audio-to-title", "default_count": 5},
    "logging": {"level": "INFO", "verbose": False},
}


class QuizConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class CatalogSettings:
    base_url: str
    resource: str
    timeout_seconds: float


@dataclass(frozen=True)
class RankingSettings:
    base_url: str
    timeout_seconds: float


@dataclass(frozen=True)
class QuizDefaults:
    format: QuizFormat
    count: QuestionCount


@dataclass(frozen=True)
class LoggingSettings:
    level: str
    verbose: bool


@dataclass(frozen=True)
class QuizConfig:
    catalog: CatalogSettings
    ranking: RankingSettings
    quiz: QuizDefaults
    logging: LoggingSettings


@dataclass(frozen=True)
class ConfigOverrides:
    """CLI-sourced overrides applied on top of file/env options."""

    catalog_url: Optional[str] = None
    ranking_url: Optional[str] = None
    log_level: Optional[str] = None
    verbose: Optional[bool] = None


@dataclass(frozen=True)
class LoadResult:
    config: QuizConfig
    layout: workspace_mod.WorkspaceLayout
    config_path: Optional[Path]


def load_config(
    *,
    config_path: Optional[Path] = None,
    overrides: Optional[ConfigOverrides] = None,
    env: Optional[Mapping[str, str]] = None,
    workspace_path: Optional[Path] = None,
) -> LoadResult:
    overrides = overrides or ConfigOverrides()
    env_map = os.environ if env is None else env

    try:
        layout = workspace_mod.ensure_workspace(env=env_map, path=workspace_path)
    except workspace_mod.WorkspaceError as exc:
        raise QuizConfigError(str(exc)) from exc

    requested = _resolve_config_path(
        config_path=config_path,
        env_map=env_map,
        default_path=layout.path_for("config") / CONFIG_FILENAME,
    )
    table: Mapping[str, Any] = DEFAULTS
    loaded_path: Optional[Path] = None
    if requested.exists():
        try:
            table = core_config.overlay_file(DEFAULTS, requested)
        except core_config.TomlConfigError as exc:
            raise QuizConfigError(str(exc)) from exc
        loaded_path = requested
    elif config_path is not None or _env(env_map, "CONFIG") is not None:
        raise QuizConfigError(f"Config file not found: {requested}")

    catalog = table["catalog"]
    ranking = table["ranking"]
    quiz = table["quiz"]
    logging_table = table["logging"]

    config = QuizConfig(
        catalog=CatalogSettings(
            base_url=_require_url(
                _pick_first(
                    overrides.catalog_url,
                    _env(env_map, "CATALOG_URL"),
                    catalog["base_url"],
                ),
                field="catalog.base_url",
            ),
            resource=_require_string(catalog["resource"], field="catalog.resource"),
            timeout_seconds=_require_timeout(
                catalog["timeout_seconds"], field="catalog.timeout_seconds"
            ),
        ),
        ranking=RankingSettings(
            base_url=_require_url(
                _pick_first(
                    overrides.ranking_url,
                    _env(env_map, "RANKING_URL"),
                    ranking["base_url"],
                ),
                field="ranking.base_url",
            ),
            timeout_seconds=_require_timeout(
                ranking["timeout_seconds"], field="ranking.timeout_seconds"
            ),
        ),
        quiz=QuizDefaults(
            format=_parse(QuizFormat.from_value, quiz["default_format"]),
            count=_parse(parse_question_count, quiz["default_count"]),
        ),
        logging=LoggingSettings(
            level=_require_string(
                _pick_first(
                    overrides.log_level,
                    _env(env_map, "LOG_LEVEL"),
                    logging_table["level"],
                ),
                field="logging.level",
            ).upper(),
            verbose=_require_bool(
                _pick_first(overrides.verbose, logging_table["verbose"]),
                field="logging.verbose",
            ),
        ),
    )
    return LoadResult(config=config, layout=layout, config_path=loaded_path)


def write_template(path: Path, *, overwrite: bool = False) -> Path:
    try:
        return core_config.write_toml_template(
            path, template=CONFIG_TEMPLATE, overwrite=overwrite
        )
    except core_config.TomlConfigError as exc:
        raise QuizConfigError(str(exc)) from exc


def _resolve_config_path(
    *,
    config_path: Optional[Path],
    env_map: Mapping[str, str],
    default_path: Path,
) -> Path:
    if config_path is not None:
        return config_path.expanduser()
    env_candidate = _env(env_map, "CONFIG")
    if env_candidate is not None:
        return Path(env_candidate).expanduser()
    return default_path


def _env(env_map: Mapping[str, str], key: str) -> Optional[str]:
    raw = env_map.get(f"{ENV_PREFIX}{key}")
    if raw is None:
        return None
    return raw.strip() or None


def _pick_first(*candidates: object) -> object:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None


def _parse(parser, value: Any) -> Any:
    try:
        return parser(value)
    except ValueError as exc:
        raise QuizConfigError(str(exc)) from exc


def _require_string(value: Any, *, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise QuizConfigError(f"'{field}' must be a non-empty string.")
    return value.strip()


def _require_url(value: Any, *, field: str) -> str:
    url = _require_string(value, field=field)
    if not url.startswith(("http://", "https://")):
        raise QuizConfigError(f"'{field}' must be an http(s) URL.")
    return url.rstrip("/")


def _require_timeout(value: Any, *, field: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise QuizConfigError(f"'{field}' must be a number.")
    if value <= 0:
        raise QuizConfigError(f"'{field}' must be greater than zero.")
    return float(value)


def _require_bool(value: Any, *, field: str) -> bool:
    if not isinstance(value, bool):
        raise QuizConfigError(f"'{field}' must be a boolean.")
    return value
