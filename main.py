"""
Command-line entry point: load settings, configure logging and serve the
assistant with uvicorn.
"""

from __future__ import annotations

import logging
import sys
from typing import List

import uvicorn

from assistant import CoverLetterAssistant
from config import DEFAULT_CONFIG_PATH, LogSettings, Settings, load_settings
from llm_handler import GeminiClient
from resume_loader import TextExtractor
from web_app import create_app

DEFAULT_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
CONSOLE_MESSAGE_LIMIT = 200

# Third-party loggers that are chatty at INFO
QUIET_LOGGERS = ("urllib3", "httpcore", "httpx", "uvicorn.access", "google.auth")


class ShortMessageFormatter(logging.Formatter):
    """Console formatter that clips long messages such as echoed prompts."""

    def __init__(self, limit: int = CONSOLE_MESSAGE_LIMIT, **kwargs):
        super().__init__(**kwargs)
        self.limit = limit

    def formatMessage(self, record):
        if len(record.message) > self.limit:
            record.message = record.message[:self.limit] + "... (truncated)"
        return super().formatMessage(record)


def _handlers(log: LogSettings) -> List[logging.Handler]:
    fmt = log.format or DEFAULT_LOG_FORMAT
    datefmt = log.date_format or DEFAULT_DATE_FORMAT

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(ShortMessageFormatter(fmt=fmt, datefmt=datefmt))
    handlers: List[logging.Handler] = [console]

    if log.file:
        # Full messages go to the file
        to_file = logging.FileHandler(log.file, encoding="utf-8")
        to_file.setFormatter(logging.Formatter(fmt=fmt, datefmt=datefmt))
        handlers.append(to_file)
    return handlers


def configure_logging(log: LogSettings) -> None:
    """Install console (and optional file) handlers on the root logger."""
    logging.basicConfig(
        level=logging.DEBUG if log.debug else logging.INFO,
        handlers=_handlers(log),
        force=True,
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def build_assistant(settings: Settings) -> CoverLetterAssistant:
    client = GeminiClient(settings.gemini_api_key, settings.gemini_model, timeout=settings.request_timeout)
    extractor = TextExtractor(
        min_text_length=settings.ocr_min_chars,
        ocr_language=settings.ocr_language,
        ocr_dpi=settings.ocr_dpi,
    )
    return CoverLetterAssistant(client, extractor, debounce_seconds=settings.debounce_seconds)


def main() -> None:
    """Start the web assistant."""
    try:
        settings = load_settings(DEFAULT_CONFIG_PATH)
    except ValueError as exc:
        logging.basicConfig(level=logging.INFO)
        logging.error("Cannot start: %s", exc)
        sys.exit(1)

    configure_logging(settings.log)
    logging.info(
        "Using model %s (timeout %.0fs), debounce %.2fs, OCR below %d chars",
        settings.gemini_model,
        settings.request_timeout,
        settings.debounce_seconds,
        settings.ocr_min_chars,
    )

    app = create_app(build_assistant(settings))
    logging.info("Open http://%s:%d in your browser", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
