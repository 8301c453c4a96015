from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from rich.logging import RichHandler

from .types import LogLevel, OccurrenceArguments

LOGGER_NAME = "rollbar_client"

_ECHO_LEVELS: dict[str, int] = {
    LogLevel.CRITICAL.value: logging.ERROR,
    LogLevel.ERROR.value: logging.ERROR,
    LogLevel.WARNING.value: logging.WARNING,
    LogLevel.INFO.value: logging.INFO,
    LogLevel.DEBUG.value: logging.DEBUG,
}


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def get_logger() -> logging.Logger:
    return logging.getLogger(LOGGER_NAME)


@dataclass
class JsonlEventLogger:
    """
    Writes pipeline outcomes as JSON lines.

    Each line is a dict that includes at least:
    - time_utc
    - event (occurrence_sent | occurrence_skipped | occurrence_ignored | transport_fallback)
    - level
    - title
    - message, reporting_method (optional)

    Usage example
    -------------
        ev = JsonlEventLogger(path=Path("logs/occurrences.jsonl"))
        ev.write(event="occurrence_sent", level="error", title="boom", reporting_method="sendBeacon")
    """
    path: Path

    def write(
        self,
        *,
        event: str,
        level: str,
        title: str,
        message: Optional[str] = None,
        reporting_method: Optional[str] = None,
    ) -> None:
        payload: dict[str, Any] = {
            "time_utc": _utc_now_iso(),
            "event": event,
            "level": level,
            "title": title,
        }
        if message:
            payload["message"] = message
        if reporting_method:
            payload["reporting_method"] = reporting_method

        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(payload, ensure_ascii=False) + "\n")


def echo_occurrence(logger: logging.Logger, arguments: OccurrenceArguments) -> None:
    """Mirror an occurrence to the local logger on the channel matching its level."""
    tag = f"[ROLLBAR {arguments.level.upper()}]"
    extras = [
        repr(value)
        for value in (arguments.error, arguments.application_state, arguments.action_history)
        if value is not None
    ]
    logger.log(_ECHO_LEVELS[arguments.level], "%s %s", tag, " ".join([arguments.title, *extras]))


def configure_logging(
    *,
    console_level: int = logging.INFO,
    log_file: Optional[Path] = None,
    file_level: int = logging.DEBUG,
) -> logging.Logger:
    """
    Configure console logging, plus an optional plain log file.

    Returns
    -------
    logger
        The configured "rollbar_client" logger.

    Usage example
    -------------
        logger = configure_logging(console_level=logging.WARNING)
        logger.info("Hello")
    """
    logger = get_logger()
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()
    logger.propagate = False

    console_handler = RichHandler(show_path=False, rich_tracebacks=False)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(file_level)
        file_handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)sZ | %(levelname)s | %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S",
            )
        )
        logger.addHandler(file_handler)

    logger.debug("Logging configured (console_level=%s, log_file=%s)", console_level, log_file)
    return logger
