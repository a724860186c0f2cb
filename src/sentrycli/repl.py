"""Interactive shell: keeps a profile and output format across commands."""

from __future__ import annotations

import signal
import sys
from types import FrameType
from typing import Any, TextIO

import yaml

from . import __version__
from .config import CONFIG_RELATIVE_PATH, OUTPUT_FORMATS, ConfigError, SentryConfig
from .logging import get_logger
from .operations import COMMANDS, Dispatcher, render_command_detail, render_command_list
from .registry import ClientRegistry
from .runner import parse_json_args
from .ux import clear_screen, print_error, print_header, print_success

try:
    import readline
except ImportError:  # pragma: no cover - platform dependent
    readline = None  # type: ignore[assignment]

PROMPT = "sentry> "
EXIT_WORDS = {"exit", "quit", "q"}

HELP_TEMPLATE = """
Current Settings:
  Profile: {profile}
  Format:  {output_format}

Usage:

commands              list all available Sentry API commands
<command> -h          quick help on <command>
<command> <arg>       run <command> with JSON argument
profile <name>        switch to a different Sentry profile
profiles              list all available profiles
format <type>         set output format ({formats})
clear                 clear the screen
exit, quit, q         exit the CLI

All commands:

{commands}

Examples:
  list-org-issues
  list-project-issues {{"projectSlug":"my-project"}}
  get-issue {{"issueId":"123456789"}}
  test-connection
"""


def _complete(text: str, state: int) -> str | None:
    words = [*COMMANDS, "commands", "profiles", "profile", "format", "help", "clear", "exit"]
    matches = [w for w in words if w.startswith(text)]
    return matches[state] if state < len(matches) else None


def _raise_interrupt(signum: int, frame: FrameType | None) -> None:
    raise KeyboardInterrupt


class InteractiveShell:
    def __init__(
        self,
        registry: ClientRegistry | None = None,
        *,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
    ) -> None:
        self.registry = registry or ClientRegistry()
        self.dispatcher = Dispatcher(self.registry)
        self.config: SentryConfig | None = None
        self.current_profile: str | None = None
        self.current_format: str = "json"
        self._stdin = stdin
        self.stdout = stdout or sys.stdout
        self.stderr = stderr or sys.stderr
        self.logger = get_logger()
        self._closed = False

    # ---- lifecycle ----------------------------------------------------
    def connect(self) -> bool:
        try:
            self.config = self.registry.init()
        except (ConfigError, yaml.YAMLError) as exc:
            print_error(f"Failed to load configuration: {exc}", self.stderr)
            print("\nMake sure:", file=self.stderr)
            print(f"1. {CONFIG_RELATIVE_PATH.as_posix()} exists", file=self.stderr)
            print(
                "2. The file contains valid Sentry profiles in YAML frontmatter",
                file=self.stderr,
            )
            return False
        self.current_profile = self.config.default_profile
        self.current_format = self.config.default_format
        self.print_help()
        return True

    def shutdown(self) -> None:
        if self._closed:
            return
        self._closed = True
        print("\nClosing Sentry connections...", file=self.stdout)
        self.registry.clear_all()

    def run(self) -> int:
        if not self.connect():
            return 1
        previous = self._install_signal_handler()
        if readline is not None and self._stdin is None:
            readline.set_completer(_complete)
            readline.parse_and_bind("tab: complete")
        try:
            while True:
                try:
                    line = self._read_line()
                except EOFError:
                    break
                if not self.handle_line(line):
                    break
        except KeyboardInterrupt:
            self.logger.debug("interrupted")
        finally:
            self.shutdown()
            if previous is not None:
                signal.signal(signal.SIGTERM, previous)
        return 0

    def _install_signal_handler(self) -> Any:
        try:
            return signal.signal(signal.SIGTERM, _raise_interrupt)
        except ValueError:  # not on the main thread
            return None

    def _read_line(self) -> str:
        if self._stdin is None:
            return input(PROMPT)
        self.stdout.write(PROMPT)
        self.stdout.flush()
        line = self._stdin.readline()
        if not line:
            raise EOFError
        return line

    # ---- commands -----------------------------------------------------
    def handle_line(self, line: str) -> bool:
        """Process one input line; False ends the session."""
        trimmed = line.strip()
        if not trimmed:
            return True
        if trimmed in EXIT_WORDS:
            return False
        if trimmed in ("help", "?"):
            self.print_help()
        elif trimmed == "commands":
            print(render_command_list(), file=self.stdout)
        elif trimmed == "clear":
            clear_screen(self.stdout)
        elif trimmed == "profiles":
            self.print_profiles()
        elif trimmed.startswith("profile "):
            self.switch_profile(trimmed[len("profile "):].strip())
        elif trimmed.startswith("format "):
            self.switch_format(trimmed[len("format "):].strip())
        else:
            command, _, arg = trimmed.partition(" ")
            arg = arg.strip()
            if arg == "-h":
                print(render_command_detail(command), file=self.stdout)
            else:
                self.run_command(command, arg)
        return True

    def switch_profile(self, name: str) -> None:
        profiles = self.config.profile_names if self.config else []
        if name in profiles:
            self.current_profile = name
            print_success(f"Switched to profile: {name}", self.stdout)
            return
        available = ", ".join(profiles) or "none"
        print_error(f'ERROR: Profile "{name}" not found. Available: {available}', self.stderr)

    def switch_format(self, output_format: str) -> None:
        if output_format in OUTPUT_FORMATS:
            self.current_format = output_format
            print_success(f"Output format set to: {output_format}", self.stdout)
            return
        print_error(f"ERROR: Invalid format. Choose: {' or '.join(OUTPUT_FORMATS)}", self.stderr)

    def print_profiles(self) -> None:
        if self.config is None:
            return
        print("\nAvailable profiles:", file=self.stdout)
        for idx, name in enumerate(self.config.profile_names, start=1):
            current = " (current)" if name == self.current_profile else ""
            print(f"{idx}. {name}{current}", file=self.stdout)

    def run_command(self, command: str, arg: str) -> None:
        if self.config is None:
            print("Configuration not loaded!", file=self.stdout)
            return
        try:
            params = parse_json_args(arg)
            profile = params.get("profile") or self.current_profile
            if not profile:
                raise ConfigError("No profile selected", kind="missing_profiles")
            output_format = params.get("format") or self.current_format
            result = self.dispatcher.invoke(command, str(profile), params, str(output_format))
        except (ValueError, ConfigError, yaml.YAMLError) as exc:
            print_error(f"Error running command: {exc}", self.stderr)
            return
        if result.success:
            print("\n" + (result.result or ""), file=self.stdout)
        elif command not in COMMANDS:
            print_error(
                f'\n{result.error}. Type "commands" to see available commands.', self.stderr
            )
        else:
            print_error(f"\n{result.error}", self.stderr)

    def print_help(self) -> None:
        print_header(f"Sentry API CLI v{__version__}", self.stdout)
        print(
            HELP_TEMPLATE.format(
                profile=self.current_profile or "none",
                output_format=self.current_format,
                formats=", ".join(OUTPUT_FORMATS),
                commands=", ".join(COMMANDS),
            ),
            file=self.stdout,
        )


def run_interactive(registry: ClientRegistry | None = None) -> int:
    return InteractiveShell(registry).run()


__all__ = ["InteractiveShell", "PROMPT", "run_interactive"]
