"""Argument and option plumbing shared by the CLI commands."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Optional

from rollbar_client.config import ConfigurationError, load_options, options_from_env
from rollbar_client.logging import JsonlEventLogger
from rollbar_client.types import ACCEPTED_LOG_LEVELS


def add_occurrence_arguments(parser: argparse.ArgumentParser) -> None:
    """Register the arguments that describe one occurrence and its options."""
    parser.add_argument("--level", required=True, choices=ACCEPTED_LOG_LEVELS)
    parser.add_argument("--title", required=True, help="Occurrence title.")
    parser.add_argument("--message-error", default=None, help="Attach a RuntimeError with this message.")
    parser.add_argument("--state", default=None, help="Application state snapshot as a JSON object.")
    parser.add_argument("--config", default=None, help="YAML options file.")
    parser.add_argument("--access-token", default=None)
    parser.add_argument("--environment", default=None)
    parser.add_argument("--api-url", default=None)
    parser.add_argument("--quiet", action="store_true", help="Disable console echo.")


def resolve_options(args: argparse.Namespace) -> dict[str, Any]:
    """
    Merge option sources: environment, then ``--config``, then explicit flags.

    Later sources win key by key. The global ``--verbose`` forces the console
    echo on and a command's ``--quiet`` turns it off; ``--quiet`` wins when both
    are given.
    """
    options = options_from_env()
    if getattr(args, "config", None):
        options.update(load_options(Path(args.config)))
    for flag, key in (("access_token", "access_token"), ("environment", "environment"), ("api_url", "api_url")):
        value = getattr(args, flag, None)
        if value is not None:
            options[key] = value
    if getattr(args, "verbose", False):
        options["is_verbose"] = True
    if getattr(args, "quiet", False):
        options["is_verbose"] = False
    return options


def event_logger(args: argparse.Namespace) -> Optional[JsonlEventLogger]:
    path = getattr(args, "events", None)
    return JsonlEventLogger(Path(path)) if path is not None else None


def parse_state(raw: Optional[str]) -> Optional[dict[str, Any]]:
    if raw is None:
        return None
    try:
        state = json.loads(raw)
    except json.JSONDecodeError as error:
        raise ConfigurationError(f"--state must be valid JSON: {error}") from error
    if not isinstance(state, dict):
        raise ConfigurationError("--state must be a JSON object.")
    return state


def build_error(message: Optional[str]) -> Optional[BaseException]:
    return RuntimeError(message) if message is not None else None
