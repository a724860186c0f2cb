"""Environment-backed credentials for connection profiles.

Profile values such as ``authToken: $SENTRY_AUTH_TOKEN`` are resolved from the
process environment first and then from a ``.env`` file in the project root.
The ``.env`` file is read with python-dotenv without touching ``os.environ``.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from dotenv import dotenv_values

from .logging import get_logger

DOTENV_FILENAME = ".env"


def read_dotenv(root: str | Path) -> dict[str, str]:
    """Return the key/value pairs of ``<root>/.env`` (empty when absent)."""
    path = Path(root) / DOTENV_FILENAME
    if not path.is_file():
        return {}
    values = dotenv_values(path)
    get_logger().debug("read dotenv file", path=str(path), keys=len(values))
    return {k: v for k, v in values.items() if v is not None}


def resolve_env_reference(
    value: str,
    *,
    environ: Mapping[str, str] | None = None,
    dotenv: Mapping[str, str] | None = None,
) -> str:
    """Resolve ``$NAME`` / ``${NAME}`` references; other values pass through.

    An unresolved reference is returned unchanged so the remote API reports
    the bad credential rather than the loader guessing at intent.
    """
    if not value.startswith("$"):
        return value
    name = value[1:]
    if name.startswith("{") and name.endswith("}"):
        name = name[1:-1]
    env = os.environ if environ is None else environ
    if name in env and env[name]:
        return env[name]
    if dotenv and dotenv.get(name):
        return dotenv[name]
    get_logger().warning("environment reference not resolved", variable=name)
    return value


__all__ = ["DOTENV_FILENAME", "read_dotenv", "resolve_env_reference"]
