"""Sentry API CLI entry point.

  sentry-api-cli                        interactive shell
  sentry-api-cli --commands             list commands
  sentry-api-cli <command> -h           help for one command
  sentry-api-cli <command> '<json>'     run one command and exit (0 ok, 1 failed)
"""

from __future__ import annotations

import argparse
import sys
from typing import Any

from . import __version__
from .formatting import FORMATS
from .operations import COMMANDS, render_command_detail, render_command_list
from .repl import run_interactive
from .runner import run_command

PROG = "sentry-api-cli"

GENERAL_HELP = f"""
Sentry CLI

Usage:

{PROG}                   start interactive CLI
{PROG} --commands        list all available commands
{PROG} <command> -h      quick help on <command>
{PROG} <command> <arg>   run command in headless mode

Options (headless mode):

--profile <name>         use a profile other than the default
--format <json|toon>     output format (shorthand: --json, --toon)

All commands:

{", ".join(COMMANDS)}

Examples:
  {PROG} list-org-issues
  {PROG} list-project-issues '{{"projectSlug":"my-project"}}'
  {PROG} get-issue '{{"issueId":"123456789"}}' --toon
  {PROG} test-connection
"""


class _HelpFormatter(argparse.HelpFormatter):
    def __init__(self, prog: str) -> None:
        super().__init__(prog, max_help_position=30, width=100)


def _build_parser() -> argparse.ArgumentParser:
    # -h is handled by hand so that "<command> -h" can show command detail.
    p = argparse.ArgumentParser(
        prog=PROG,
        description="Sentry API client",
        add_help=False,
        formatter_class=_HelpFormatter,
    )
    p.add_argument("command", nargs="?")
    p.add_argument("args", nargs="?", help="JSON object with command parameters")
    p.add_argument("-h", "--help", action="store_true")
    p.add_argument("-v", "--version", action="store_true")
    p.add_argument("--commands", action="store_true")
    p.add_argument("--profile")
    fmt = p.add_mutually_exclusive_group()
    fmt.add_argument("--format", dest="output_format", choices=FORMATS)
    fmt.add_argument("--json", dest="output_format", action="store_const", const="json")
    fmt.add_argument("--toon", dest="output_format", action="store_const", const="toon")
    return p


def _handle_flags(args: Any) -> int | None:
    if args.version:
        print(__version__)
        return 0
    if args.commands:
        print(render_command_list())
        return 0
    if args.help:
        if args.command:
            print(render_command_detail(args.command))
        else:
            print(GENERAL_HELP)
        return 0
    return None


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    handled = _handle_flags(args)
    if handled is not None:
        return handled
    if args.command is None:
        return run_interactive()
    return run_command(
        args.command,
        args.args,
        profile=args.profile,
        output_format=args.output_format,
    )


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
