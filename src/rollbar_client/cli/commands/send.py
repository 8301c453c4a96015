"""`rollbar-client send` command implementation."""

from __future__ import annotations

import argparse

from rollbar_client.cli.options import (
    add_occurrence_arguments,
    build_error,
    event_logger,
    parse_state,
    resolve_options,
)
from rollbar_client.client import RollbarClient


def add_subparser(subparsers: argparse._SubParsersAction) -> None:
    """Register the `send` command."""
    parser = subparsers.add_parser("send", help="Report one occurrence.")
    add_occurrence_arguments(parser)
    parser.set_defaults(command="send")


def run(args: argparse.Namespace) -> None:
    """Execute the `send` command."""
    client = RollbarClient(resolve_options(args), event_logger=event_logger(args))
    method = client.log(
        args.level,
        args.title,
        build_error(args.message_error),
        parse_state(args.state),
    )
    if method is None:
        print("Occurrence not sent (duplicate or ignored).")
    else:
        print(f"Occurrence sent via {method.value}.")
