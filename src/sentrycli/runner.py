"""Headless (single-shot) command execution.

``run_command`` parses the JSON argument blob, resolves profile and format,
dispatches once and maps the outcome to a process exit code. The client pool
is always cleared before returning.
"""

from __future__ import annotations

import json
import sys
import time
from typing import Any, TextIO

import yaml

from .config import ConfigError, SentryConfig
from .logging import get_logger
from .operations import ApiResult, Dispatcher
from .registry import ClientRegistry

EXIT_OK = 0
EXIT_FAILURE = 1


def parse_json_args(raw: str | None) -> dict[str, Any]:
    """Parse the command's JSON argument; blank or absent means no parameters."""
    if raw is None or not raw.strip():
        return {}
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError("command arguments must be a JSON object")
    return data


def select_profile(config: SentryConfig, params: dict[str, Any], override: str | None) -> str:
    profile = override or params.get("profile") or config.default_profile
    if not profile:
        raise ConfigError("No profiles configured", kind="missing_profiles")
    return str(profile)


def select_format(config: SentryConfig, params: dict[str, Any], override: str | None) -> str:
    return str(override or params.get("format") or config.default_format)


def emit_result(result: ApiResult, stdout: TextIO, stderr: TextIO) -> int:
    if result.success:
        print(result.result, file=stdout)
        return EXIT_OK
    print(result.error, file=stderr)
    return EXIT_FAILURE


def run_command(
    command: str,
    raw_args: str | None = None,
    *,
    profile: str | None = None,
    output_format: str | None = None,
    registry: ClientRegistry | None = None,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
) -> int:
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr
    registry = registry or ClientRegistry()
    logger = get_logger()
    start = time.monotonic()
    exit_code = EXIT_FAILURE
    try:
        params = parse_json_args(raw_args)
        config = registry.init()
        result = Dispatcher(registry).invoke(
            command,
            select_profile(config, params, profile),
            params,
            select_format(config, params, output_format),
        )
        exit_code = emit_result(result, stdout, stderr)
    except (ValueError, ConfigError, yaml.YAMLError) as exc:
        print(f"Error executing command: {exc}", file=stderr)
        exit_code = EXIT_FAILURE
    finally:
        registry.clear_all()
        logger.log_performance(
            "headless_command",
            (time.monotonic() - start) * 1000,
            command=command,
            exit_code=exit_code,
        )
    return exit_code


__all__ = ["EXIT_FAILURE", "EXIT_OK", "parse_json_args", "run_command"]
