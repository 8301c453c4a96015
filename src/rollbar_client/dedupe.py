"""In-session suppression of repeated occurrences."""

from __future__ import annotations

import json
import logging
import traceback as _traceback
from typing import Any, Mapping, Sequence

from .logging import get_logger


def project_exception(error: BaseException) -> dict[str, str]:
    """
    Reduce an exception to its own fields, as strings.

    Two exceptions with the same message, traceback and instance attributes
    project to equal maps regardless of identity.
    """
    projected: dict[str, str] = {
        "message": str(error),
        "stack": "".join(_traceback.format_exception(type(error), error, error.__traceback__)),
    }
    for key, value in vars(error).items():
        projected[key] = str(value)
    return projected


def _normalize(value: Any) -> Any:
    # Object keys are strings once serialized, so mixed key types collapse to str.
    if isinstance(value, BaseException):
        return project_exception(value)
    if isinstance(value, Mapping):
        return {str(key): _normalize(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalize(item) for item in value]
    return value


class ErrorHistory:
    """
    Remembers every accepted argument set for the life of one reporter.

    Entries are canonical JSON strings compared by equality. The list only
    grows; it is bounded by session length, not pruned.

    Usage example
    -------------
        history = ErrorHistory()
        history.should_skip(("error", "boom", exc, None, None))  # False
        history.should_skip(("error", "boom", exc, None, None))  # True
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or get_logger()
        self._entries: list[str] = []

    def __len__(self) -> int:
        return len(self._entries)

    @staticmethod
    def serialize(arguments: Sequence[Any]) -> str:
        return json.dumps(_normalize(list(arguments)), sort_keys=True, ensure_ascii=False, default=str)

    def should_skip(self, arguments: Sequence[Any]) -> bool:
        """Return True for a repeat; otherwise record the arguments and return False."""
        serialized = self.serialize(arguments)
        if any(entry == serialized for entry in self._entries):
            self._logger.info("[ROLLBAR CLIENT] Skipping duplicate error %s", list(arguments))
            return True
        self._entries.append(serialized)
        return False
