from __future__ import annotations

import asyncio
import sys
import threading
from types import TracebackType
from typing import Any, Callable, Mapping, Optional, Sequence

from .environment import Environment
from .logging import JsonlEventLogger, get_logger
from .submitter import Reporter
from .types import ReportingMethod

UNHANDLED_ERROR_TITLE = "Unhandled error occurred"
UNHANDLED_REJECTION_TITLE = "Unhandled promise rejection occurred"

logger = get_logger()


class RollbarClient:
    """
    Lightweight facade: holds options, owns listener hooks, builds the
    :class:`Reporter` on first use.

    Listener options
    ----------------
    ``on_unhandled_error`` covers ``sys.excepthook`` and ``threading.excepthook``;
    ``on_unhandled_rejection`` covers the asyncio loop exception handler.
    Unset installs the default (report at "warning", then chain to the previous
    hook), False installs nothing, a callable is installed in place of the default.

    Usage example
    -------------
        client = RollbarClient({"access_token": "abc123", "environment": "prod"})
        client.initialize_listeners()
        client.log("error", "payment declined", exc)
    """

    def __init__(
        self,
        options: Mapping[str, Any],
        *,
        environment: Optional[Environment] = None,
        event_logger: Optional[JsonlEventLogger] = None,
    ) -> None:
        self.configuration = dict(options)
        self.environment = environment
        self.event_logger = event_logger
        self.submitter: Optional[Reporter] = None

        self._previous_excepthook: Optional[Callable[..., Any]] = None
        self._previous_threading_excepthook: Optional[Callable[..., Any]] = None
        self._previous_loop_handler: Optional[Callable[..., Any]] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._error_hooks_installed = False

    def get_submitter(self) -> Reporter:
        """Return the reporter, constructing it on the first call."""
        if self.submitter is None:
            self.submitter = Reporter(
                self.configuration,
                environment=self.environment,
                event_logger=self.event_logger,
            )
        return self.submitter

    def log(
        self,
        level: str,
        title: str,
        error: Optional[BaseException] = None,
        application_state: Optional[Mapping[str, Any]] = None,
        action_history: Optional[Sequence[Mapping[str, Any]]] = None,
    ) -> Optional[ReportingMethod]:
        return self.get_submitter().report(level, title, error, application_state, action_history)

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def initialize_listeners(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        """
        Install the uncaught-error and unhandled-rejection hooks.

        The asyncio hook is installed on ``loop``, or on the running loop when
        called from inside one; with neither, only the error hooks are set.
        Hooks already installed by this client are left in place, so repeated
        calls are no-ops.
        """
        on_error = self.configuration.get("on_unhandled_error")
        if on_error is not False and not self._error_hooks_installed:
            self._previous_excepthook = sys.excepthook
            self._previous_threading_excepthook = threading.excepthook
            if callable(on_error):
                sys.excepthook = on_error
                threading.excepthook = _thread_adapter(on_error)
            else:
                sys.excepthook = self.on_error_default
                threading.excepthook = self.on_thread_error_default
            self._error_hooks_installed = True

        on_rejection = self.configuration.get("on_unhandled_rejection")
        if on_rejection is not False and self._loop is None:
            if loop is None:
                try:
                    loop = asyncio.get_running_loop()
                except RuntimeError:
                    loop = None
            if loop is None:
                logger.debug("No event loop available; unhandled rejection listener not installed")
                return
            self._loop = loop
            self._previous_loop_handler = loop.get_exception_handler()
            loop.set_exception_handler(on_rejection if callable(on_rejection) else self.on_unhandled_rejection_default)

    def remove_listeners(self) -> None:
        """Restore whatever hooks were in place before :meth:`initialize_listeners`."""
        if self._previous_excepthook is not None:
            sys.excepthook = self._previous_excepthook
            self._previous_excepthook = None
        if self._previous_threading_excepthook is not None:
            threading.excepthook = self._previous_threading_excepthook
            self._previous_threading_excepthook = None
        self._error_hooks_installed = False
        if self._loop is not None:
            self._loop.set_exception_handler(self._previous_loop_handler)
            self._loop = None
            self._previous_loop_handler = None

    def _report_unhandled(self, title: str, error: Optional[BaseException]) -> None:
        try:
            self.log("warning", title, error)
        except Exception:
            logger.exception("[ROLLBAR CLIENT] Failed to report: %s", title)

    def on_error_default(
        self,
        exc_type: type[BaseException],
        exc_value: BaseException,
        exc_tb: Optional[TracebackType],
    ) -> None:
        self._report_unhandled(UNHANDLED_ERROR_TITLE, exc_value)
        previous = self._previous_excepthook or sys.__excepthook__
        previous(exc_type, exc_value, exc_tb)

    def on_thread_error_default(self, args: "threading.ExceptHookArgs") -> None:
        if args.exc_value is not None:
            self._report_unhandled(UNHANDLED_ERROR_TITLE, args.exc_value)
        previous = self._previous_threading_excepthook or threading.__excepthook__
        previous(args)

    def on_unhandled_rejection_default(self, loop: asyncio.AbstractEventLoop, context: dict[str, Any]) -> None:
        self._report_unhandled(UNHANDLED_REJECTION_TITLE, context.get("exception"))
        if self._previous_loop_handler is not None:
            self._previous_loop_handler(loop, context)
        else:
            loop.default_exception_handler(context)


def _thread_adapter(hook: Callable[..., Any]) -> Callable[["threading.ExceptHookArgs"], None]:
    def _call(args: "threading.ExceptHookArgs") -> None:
        hook(args.exc_type, args.exc_value, args.exc_traceback)

    return _call
