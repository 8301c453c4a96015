"""`rollbar-client preview` command implementation."""

from __future__ import annotations

import argparse
import json

from rollbar_client.cli.options import add_occurrence_arguments, build_error, parse_state, resolve_options
from rollbar_client.config import resolve_configuration
from rollbar_client.environment import Environment
from rollbar_client.payload import build_payload
from rollbar_client.types import OccurrenceArguments


def add_subparser(subparsers: argparse._SubParsersAction) -> None:
    """Register the `preview` command."""
    parser = subparsers.add_parser("preview", help="Print the canonical payload without sending it.")
    add_occurrence_arguments(parser)
    parser.add_argument("--show-token", action="store_true", help="Do not mask access_token in the output.")
    parser.set_defaults(command="preview")


def run(args: argparse.Namespace) -> None:
    """Execute the `preview` command."""
    environment = Environment()
    config = resolve_configuration(resolve_options(args), environment=environment)
    arguments = OccurrenceArguments(
        level=args.level,
        title=args.title,
        error=build_error(args.message_error),
        application_state=parse_state(args.state),
    )
    arguments.validate()

    payload = build_payload(arguments, config, environment)
    if not args.show_token:
        payload["access_token"] = "***"
    print(json.dumps(payload, indent=2, ensure_ascii=False, default=str))
