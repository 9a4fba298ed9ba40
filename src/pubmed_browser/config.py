"""Configuration persistence: settings and the durable key-value store."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir

from pubmed_browser.models import (
    CONFIG_APP_NAME,
    DEFAULT_DAYS_BACK,
    DEFAULT_SORT,
    RECOMMENDED_TERMS,
    SORT_OPTIONS,
)
from pubmed_browser.query import coerce_days_back
from pubmed_browser.themes import THEME_NAMES

logger = logging.getLogger(__name__)

# ============================================================================
# Configuration Persistence
# ============================================================================
#
# Validation contract: _dict_to_settings() guarantees valid output for any input:
#
#   Field                    Rule                         Handler
#   ───────────────────────  ───────────────────────────  ──────────────────
#   days_back                integer ≥ 1                  coerce_days_back
#   sort                     key of SORT_OPTIONS          _dict_to_settings
#   theme_name               in THEME_NAMES               _dict_to_settings
#   recommended_terms[]      non-empty strings, ≤ 12      _parse_recommended_terms
#   request_timeout_seconds  1 ≤ x ≤ 120                  _coerce_timeout
#   scalar fields            type-checked via _safe_get() _dict_to_settings
#
CONFIG_FILENAME = "config.json"
STORE_FILENAME = "store.json"

DEFAULT_REQUEST_TIMEOUT_SECONDS = 30
MAX_REQUEST_TIMEOUT_SECONDS = 120
MAX_RECOMMENDED_TERMS = 12


@dataclass(slots=True)
class AppSettings:
    """User preferences restored between runs."""

    days_back: int = DEFAULT_DAYS_BACK
    sort: str = DEFAULT_SORT
    theme_name: str = THEME_NAMES[0]
    recommended_terms: list[str] = field(default_factory=lambda: list(RECOMMENDED_TERMS))
    request_timeout_seconds: int = DEFAULT_REQUEST_TIMEOUT_SECONDS
    api_key: str = ""  # Optional NCBI API key for higher rate limits
    version: int = 1


def get_config_dir() -> Path:
    """Get the per-user configuration directory.

    Uses platformdirs for cross-platform config directory:
    - Linux: ~/.config/pubmed-browser/
    - macOS: ~/Library/Application Support/pubmed-browser/
    - Windows: %APPDATA%/pubmed-browser/
    """
    return Path(user_config_dir(CONFIG_APP_NAME))


def get_config_path() -> Path:
    """Get the path to the settings file."""
    return get_config_dir() / CONFIG_FILENAME


def get_store_path() -> Path:
    """Get the path to the durable key-value store file."""
    return get_config_dir() / STORE_FILENAME


def atomic_write_text(path: Path, text: str) -> None:
    """Write text to path atomically via tempfile + os.replace().

    Creates the parent directory if needed. Raises OSError on failure.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp", prefix=f".{path.stem}-")
    closed = False
    try:
        os.write(fd, text.encode("utf-8"))
        os.close(fd)
        closed = True
        os.replace(tmp_path, path)
    except BaseException:
        if not closed:
            os.close(fd)
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


class JsonKeyValueStore:
    """String key-value store persisted as one JSON object on disk.

    Reads come from an in-memory mirror loaded on first access; every set()
    rewrites the whole file.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or get_store_path()
        self._data: dict[str, str] | None = None

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        if self._data is not None:
            return self._data
        self._data = {}
        if not self._path.exists():
            return self._data
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            logger.warning("Store file has invalid JSON, starting empty: %s", e)
            return self._data
        except OSError as e:
            logger.warning("Could not read store file, starting empty: %s", e)
            return self._data
        if not isinstance(raw, dict):
            logger.warning("Store file is not a JSON object, starting empty")
            return self._data
        self._data = {k: v for k, v in raw.items() if isinstance(k, str) and isinstance(v, str)}
        return self._data

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> bool:
        """Store a value and persist the whole mapping.

        Returns True on success, False if the file could not be written.
        The in-memory value is updated either way.
        """
        data = self._load()
        data[key] = value
        try:
            atomic_write_text(self._path, json.dumps(data, indent=2, ensure_ascii=False))
        except OSError as e:
            logger.error("Failed to write store %s: %s", self._path, e)
            return False
        return True


def _safe_get(data: dict, key: str, default: Any, expected_type: type) -> Any:
    """Safely get a value from dict with type validation.

    Returns the default if key is missing or value has wrong type.
    """
    value = data.get(key, default)
    if not isinstance(value, expected_type) or isinstance(value, bool) != isinstance(
        default, bool
    ):
        return default
    return value


def _coerce_timeout(value: Any) -> int:
    """Validate and clamp the configured request timeout."""
    if not isinstance(value, int) or isinstance(value, bool):
        return DEFAULT_REQUEST_TIMEOUT_SECONDS
    return max(1, min(value, MAX_REQUEST_TIMEOUT_SECONDS))


def _parse_recommended_terms(raw: Any) -> list[str]:
    """Parse and validate recommended_terms from settings data."""
    if not isinstance(raw, list):
        return list(RECOMMENDED_TERMS)
    terms = [t.strip() for t in raw if isinstance(t, str) and t.strip()]
    return list(dict.fromkeys(terms))[:MAX_RECOMMENDED_TERMS]


def _settings_to_dict(settings: AppSettings) -> dict[str, Any]:
    """Serialize AppSettings to a JSON-compatible dictionary."""
    return {
        "version": settings.version,
        "days_back": coerce_days_back(settings.days_back),
        "sort": settings.sort,
        "theme_name": settings.theme_name,
        "recommended_terms": settings.recommended_terms,
        "request_timeout_seconds": _coerce_timeout(settings.request_timeout_seconds),
        "api_key": settings.api_key,
    }


def _dict_to_settings(data: dict[str, Any]) -> AppSettings:
    """Deserialize a dictionary to AppSettings with type validation."""
    sort = _safe_get(data, "sort", DEFAULT_SORT, str)
    if sort not in SORT_OPTIONS:
        logger.warning("Unknown sort %r in settings, defaulting to %r", sort, DEFAULT_SORT)
        sort = DEFAULT_SORT
    theme_name = _safe_get(data, "theme_name", THEME_NAMES[0], str)
    if theme_name not in THEME_NAMES:
        theme_name = THEME_NAMES[0]
    return AppSettings(
        days_back=coerce_days_back(_safe_get(data, "days_back", DEFAULT_DAYS_BACK, int)),
        sort=sort,
        theme_name=theme_name,
        recommended_terms=_parse_recommended_terms(data.get("recommended_terms")),
        request_timeout_seconds=_coerce_timeout(
            data.get("request_timeout_seconds", DEFAULT_REQUEST_TIMEOUT_SECONDS)
        ),
        api_key=_safe_get(data, "api_key", "", str),
        version=_safe_get(data, "version", 1, int),
    )


def load_settings(path: Path | None = None) -> AppSettings:
    """Load settings from disk.

    Returns default settings if the file doesn't exist or is corrupted.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        return AppSettings()

    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        logger.warning("Config file has invalid JSON, using defaults: %s", e)
        return AppSettings()
    except OSError as e:
        logger.warning("Could not read config file, using defaults: %s", e)
        return AppSettings()
    if not isinstance(data, dict):
        logger.warning("Config file has invalid structure, using defaults")
        return AppSettings()
    return _dict_to_settings(data)


def save_settings(settings: AppSettings, path: Path | None = None) -> bool:
    """Save settings to disk atomically.

    Returns True on success, False on failure.
    """
    config_path = path or get_config_path()
    try:
        json_str = json.dumps(_settings_to_dict(settings), indent=2, ensure_ascii=False)
        atomic_write_text(config_path, json_str)
        return True
    except OSError as e:
        logger.error("Failed to save config: %s", e)
        return False


__all__ = [
    "CONFIG_APP_NAME",
    "CONFIG_FILENAME",
    "DEFAULT_REQUEST_TIMEOUT_SECONDS",
    "STORE_FILENAME",
    "AppSettings",
    "JsonKeyValueStore",
    "atomic_write_text",
    "get_config_dir",
    "get_config_path",
    "get_store_path",
    "load_settings",
    "save_settings",
]
