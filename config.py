"""
Settings for the cover letter assistant.

Values come from an optional JSON file next to the working directory. The
Gemini API key is read from a key file named in that JSON or from the
GEMINI_API_KEY environment variable.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Optional

LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("cover_letter_config.json")
API_KEY_ENV = "GEMINI_API_KEY"
LOG_TIMESTAMP_PLACEHOLDER = "YYYYMMDD_HHMMSS"


@dataclass(frozen=True)
class LogSettings:
    """Where and how log records are written."""

    file: Optional[Path] = None
    format: Optional[str] = None
    date_format: Optional[str] = None
    debug: bool = False


@dataclass(frozen=True)
class Settings:
    """Everything main() needs to wire the assistant together."""

    gemini_api_key: str
    gemini_model: str = "gemini-2.5-flash"
    request_timeout: float = 60.0
    debounce_seconds: float = 0.5
    ocr_min_chars: int = 100
    ocr_language: str = "eng"
    ocr_dpi: int = 300
    host: str = "127.0.0.1"
    port: int = 8000
    log: LogSettings = LogSettings()


def _config_from_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        LOGGER.info("No configuration file at %s; using defaults", path)
        return {}
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in configuration file: {path}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file {path} must contain a JSON object")
    return data


def _relative_to(base: Path, value: Optional[str]) -> Optional[Path]:
    if not value:
        return None
    path = Path(value)
    if not path.is_absolute():
        path = (base / path).resolve()
    return path


def _api_key(base: Path, key_file: Optional[str]) -> str:
    """Prefer the key file; fall back to the environment."""
    path = _relative_to(base, key_file)
    if path is not None:
        if path.is_file():
            key = path.read_text(encoding="utf-8").strip()
            if key:
                return key
        LOGGER.warning("API key file %s is missing or empty; trying %s", path, API_KEY_ENV)
    key = os.environ.get(API_KEY_ENV, "").strip()
    if not key:
        raise ValueError(
            f"Gemini API key missing. Set {API_KEY_ENV} env or provide google_api_key_file."
        )
    return key


def _number(config: Dict[str, Any], key: str, default: Any, cast: Callable[[Any], Any], minimum: float = 0,
            inclusive: bool = False) -> Any:
    try:
        value = cast(config.get(key, default))
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Config '{key}' must be a number.") from exc
    if value < minimum or (value == minimum and not inclusive):
        raise ValueError(f"Config '{key}' must be {'>=' if inclusive else '>'} {minimum}.")
    return value


def _log_settings(base: Path, config: Dict[str, Any]) -> LogSettings:
    log_file = None
    name = config.get("log_file")
    if name is not None and not isinstance(name, str):
        raise ValueError("Config 'log_file' must be a path string.")
    if name:
        name = name.replace(LOG_TIMESTAMP_PLACEHOLDER, datetime.now().strftime("%Y%m%d_%H%M%S"))
        log_file = _relative_to(base, name)
        log_file.parent.mkdir(parents=True, exist_ok=True)
    return LogSettings(
        file=log_file,
        format=config.get("log_format"),
        date_format=config.get("log_date_format"),
        debug=bool(config.get("debug", False)),
    )


def load_settings(config_path: Path = DEFAULT_CONFIG_PATH) -> Settings:
    """
    Build Settings from the JSON file (if any) and the environment.

    Args:
        config_path: Location of the JSON file. Relative paths inside it are
            resolved against its directory.

    Returns:
        Populated Settings.

    Raises:
        ValueError: If the API key is missing, the file is not valid JSON or
            a numeric value is out of range.
    """
    config_path = config_path.resolve()
    config = _config_from_file(config_path)
    base = config_path.parent
    defaults = Settings(gemini_api_key="")

    return Settings(
        gemini_api_key=_api_key(base, config.get("google_api_key_file")),
        gemini_model=config.get("gemini_model", defaults.gemini_model),
        request_timeout=_number(config, "request_timeout", defaults.request_timeout, float),
        debounce_seconds=_number(config, "debounce_seconds", defaults.debounce_seconds, float, inclusive=True),
        ocr_min_chars=_number(config, "ocr_min_chars", defaults.ocr_min_chars, int),
        ocr_language=config.get("ocr_language", defaults.ocr_language),
        ocr_dpi=_number(config, "ocr_dpi", defaults.ocr_dpi, int),
        host=config.get("host", defaults.host),
        port=_number(config, "port", defaults.port, int),
        log=_log_settings(base, config),
    )
