from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Sequence


class LogLevel(str, Enum):
    """Severity of an occurrence, as accepted by the ingestion API."""
    CRITICAL = "critical"
    DEBUG = "debug"
    ERROR = "error"
    INFO = "info"
    WARNING = "warning"


class ReportingMethod(str, Enum):
    """Delivery primitive that carried an occurrence (``custom.reportingMethod``)."""
    BEACON = "sendBeacon"
    FETCH = "fetch"


ACCEPTED_LOG_LEVELS: tuple[str, ...] = tuple(level.value for level in LogLevel)


class ReportValidationError(ValueError):
    """Raised when ``report`` receives an unrecognized log level."""


@dataclass(frozen=True)
class OccurrenceArguments:
    """
    One call to ``report``.

    Usage example
    -------------
        args = OccurrenceArguments(level="error", title="checkout failed", error=exc)
        args.validate()
    """
    level: str
    title: str
    error: Optional[BaseException] = None
    application_state: Optional[Mapping[str, Any]] = None
    action_history: Optional[Sequence[Mapping[str, Any]]] = None

    def as_tuple(self) -> tuple[Any, ...]:
        return (self.level, self.title, self.error, self.application_state, self.action_history)

    def validate(self) -> None:
        """Reject bad levels and mistyped arguments before any side effect happens."""
        if self.level not in ACCEPTED_LOG_LEVELS:
            raise ReportValidationError(
                f"Log level can only be one of the following: {', '.join(ACCEPTED_LOG_LEVELS)}"
            )
        if self.error is not None and not isinstance(self.error, BaseException):
            raise TypeError('Error objects must be an instance of class "BaseException"')
        if self.action_history is not None and not isinstance(self.action_history, (list, tuple)):
            raise TypeError("action_history must be a list")
