"""
rollbar_client: occurrence reporter with in-session dedupe and resilient delivery.

Key primitives
--------------
- RollbarClient: lazy facade; owns listener hooks and builds the Reporter on first use
- Reporter: validate -> dedupe -> echo -> build -> veto -> mutate -> deliver
- resolve_configuration(): defaults + caller options + user-agent rule
- build_payload(): pure, canonical wire-record builder
- ErrorHistory: per-reporter duplicate gate
- Transport: beacon delivery with a single HTTP fallback
- configure_logging(), JsonlEventLogger: console echo and outcome journal
"""

from .client import RollbarClient
from .config import ConfigurationError, ReporterConfig, load_options, options_from_env, resolve_configuration
from .dedupe import ErrorHistory
from .environment import Environment
from .logging import JsonlEventLogger, configure_logging
from .payload import build_payload
from .submitter import Reporter
from .transport import Transport
from .types import LogLevel, OccurrenceArguments, ReportingMethod, ReportValidationError
from .version import __version__

__all__ = [
    "ConfigurationError",
    "Environment",
    "ErrorHistory",
    "JsonlEventLogger",
    "LogLevel",
    "OccurrenceArguments",
    "Reporter",
    "ReporterConfig",
    "ReportingMethod",
    "ReportValidationError",
    "RollbarClient",
    "Transport",
    "build_payload",
    "configure_logging",
    "load_options",
    "options_from_env",
    "resolve_configuration",
    "__version__",
]
