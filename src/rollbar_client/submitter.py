from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

from .config import ReporterConfig, resolve_configuration
from .dedupe import ErrorHistory
from .environment import Environment
from .logging import JsonlEventLogger, echo_occurrence, get_logger
from .payload import build_payload
from .transport import Transport
from .types import OccurrenceArguments, ReportingMethod


class Reporter:
    """
    Runs one occurrence through the pipeline.

    Steps, in order
    ---------------
    1. validate  - bad level raises ReportValidationError, bad types raise TypeError
    2. dedupe    - repeats stop here silently
    3. echo      - mirror to the local logger when ``is_verbose``
    4. build     - canonical payload
    5. veto      - ``should_ignore_occurrence`` may drop it
    6. mutate    - ``transform`` edits ``payload["data"]`` in place
    7. deliver   - beacon, then HTTP fallback

    Only step 1 raises. Everything after it is a silent no-op from the
    caller's point of view.

    Usage example
    -------------
        reporter = Reporter({"access_token": "abc123", "environment": "prod"})
        reporter.report("error", "checkout failed", exc, {"cart": 3})
    """

    def __init__(
        self,
        options: Mapping[str, Any],
        *,
        environment: Optional[Environment] = None,
        logger: Optional[logging.Logger] = None,
        event_logger: Optional[JsonlEventLogger] = None,
    ) -> None:
        self.environment = environment if environment is not None else Environment.detect()
        self.configuration: ReporterConfig = resolve_configuration(
            options, environment=self.environment
        )
        self.logger = logger or get_logger()
        self.event_logger = event_logger
        self.error_history = ErrorHistory(logger=self.logger)
        self.transport = Transport(
            beacon=self.environment.beacon,
            request=self.environment.request,
            logger=self.logger,
        )

    def _record(self, event: str, arguments: OccurrenceArguments, **fields: Optional[str]) -> None:
        if self.event_logger is not None:
            self.event_logger.write(event=event, level=arguments.level, title=arguments.title, **fields)

    def build_payload(self, arguments: OccurrenceArguments) -> dict[str, Any]:
        return build_payload(arguments, self.configuration, self.environment)

    def report(
        self,
        level: str,
        title: str,
        error: Optional[BaseException] = None,
        application_state: Optional[Mapping[str, Any]] = None,
        action_history: Optional[Sequence[Mapping[str, Any]]] = None,
    ) -> Optional[ReportingMethod]:
        """
        Submit one occurrence.

        Returns
        -------
        method
            The reporting method that carried the payload, or None when the
            occurrence was skipped as a duplicate or vetoed.
        """
        arguments = OccurrenceArguments(
            level=level,
            title=title,
            error=error,
            application_state=application_state,
            action_history=action_history,
        )
        arguments.validate()

        if self.error_history.should_skip(arguments.as_tuple()):
            self._record("occurrence_skipped", arguments, message="duplicate")
            return None

        config = self.configuration
        if config.is_verbose:
            echo_occurrence(self.logger, arguments)

        payload = self.build_payload(arguments)

        if config.should_ignore_occurrence is not None and config.should_ignore_occurrence(payload, config):
            self.logger.info("[ROLLBAR CLIENT] Ignoring occurrence %s", payload["data"].get("title"))
            self._record("occurrence_ignored", arguments, message="should_ignore_occurrence")
            return None

        if config.transform is not None:
            config.transform(payload["data"], config)

        method = self.transport.deliver(config.api_url, payload)
        if method is ReportingMethod.FETCH:
            self._record("transport_fallback", arguments, reporting_method=method.value)
        self._record("occurrence_sent", arguments, reporting_method=method.value)
        return method
