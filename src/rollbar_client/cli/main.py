"""rollbar-client command-line interface entrypoint."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Callable, Sequence
from pathlib import Path
from types import ModuleType

from rollbar_client.cli.commands import preview, send
from rollbar_client.logging import configure_logging

CommandModule = ModuleType
CommandRunner = Callable[[argparse.Namespace], None]

# Map CLI subcommands to their implementation modules.
_COMMANDS: dict[str, CommandModule] = {
    "send": send,
    "preview": preview,
}


def build_arg_parser() -> argparse.ArgumentParser:
    """
    Build the top-level parser.

    Global flags
    ------------
    -v/--verbose  echo every occurrence (``is_verbose``) and show debug records
    --log-file    also write the "rollbar_client" logger to a plain file
    --events      append pipeline outcomes to a JSONL journal
    """
    parser = argparse.ArgumentParser(
        prog="rollbar-client",
        description="rollbar-client - report occurrences to an ingestion endpoint",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Echo occurrences to the console and show debug output.",
    )
    parser.add_argument("--log-file", type=Path, default=None, help="Also write log records to this file.")
    parser.add_argument("--events", type=Path, default=None, help="Append occurrence outcomes as JSON lines.")
    subparsers = parser.add_subparsers(dest="command", required=True, metavar="<command>")

    for name, module in _COMMANDS.items():
        add_subparser = getattr(module, "add_subparser", None)
        if add_subparser is None:
            raise RuntimeError(f"CLI command module '{name}' is missing add_subparser().")
        add_subparser(subparsers)

    return parser


def main(argv: Sequence[str] | None = None) -> None:
    """Configure the reporter's logging, then dispatch to the selected command."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    command_name = str(args.command)

    module = _COMMANDS.get(command_name)
    if module is None:
        raise RuntimeError(f"Unknown command: {command_name}")

    runner: CommandRunner | None = getattr(module, "run", None)
    if runner is None:
        raise RuntimeError(f"CLI command module '{command_name}' is missing run().")

    configure_logging(
        console_level=logging.DEBUG if args.verbose else logging.INFO,
        log_file=args.log_file,
    )
    runner(args)


app = main


if __name__ == "__main__":
    main()
