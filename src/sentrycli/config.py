from __future__ import annotations

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, cast

import yaml

from .env_auth import read_dotenv, resolve_env_reference
from .logging import get_logger

CONFIG_RELATIVE_PATH = Path(".claude") / "sentry-config.local.md"
PROJECT_ROOT_ENV = "CLAUDE_PROJECT_ROOT"
DEFAULT_BASE_URL = "https://sentry.io/api/0"
OUTPUT_FORMATS = ("json", "toon")
DEFAULT_FORMAT = "json"
REQUIRED_PROFILE_FIELDS = ("authToken", "organization")

_FRONTMATTER = re.compile(r"\A---\r?\n(.*?)\r?\n---", re.DOTALL)


class ConfigError(RuntimeError):
    """Raised when the profile configuration cannot be loaded or resolved."""

    def __init__(self, message: str, *, kind: str = "invalid") -> None:
        super().__init__(message)
        self.kind = kind


class ProfileNotFoundError(ConfigError):
    def __init__(self, message: str, *, available: list[str]) -> None:
        super().__init__(message, kind="profile_not_found")
        self.available = available


@dataclass(frozen=True)
class Profile:
    auth_token: str
    organization: str
    base_url: str | None = None


@dataclass(frozen=True)
class SentryConfig:
    profiles: dict[str, Profile]
    default_profile: str | None
    default_format: str
    source_file: Path = field(compare=False)

    @property
    def profile_names(self) -> list[str]:
        return list(self.profiles)


@dataclass(frozen=True)
class ClientOptions:
    auth_token: str
    organization: str
    base_url: str


def find_project_root(env: Mapping[str, str] | None = None) -> Path:
    env = os.environ if env is None else env
    return Path(env.get(PROJECT_ROOT_ENV) or os.getcwd())


def config_path(root: str | Path) -> Path:
    return Path(root) / CONFIG_RELATIVE_PATH


def _extract_frontmatter(text: str) -> str:
    match = _FRONTMATTER.match(text)
    if not match:
        raise ConfigError(
            "Invalid configuration file format. "
            "Expected YAML frontmatter (---...---) at the beginning.",
            kind="bad_format",
        )
    return match.group(1)


def _parse_profile(name: str, raw: Any) -> Profile:
    data = cast(dict[str, Any], raw if isinstance(raw, dict) else {})
    for key in REQUIRED_PROFILE_FIELDS:
        if not data.get(key):
            raise ConfigError(
                f'Profile "{name}" missing required field: {key}', kind="missing_field"
            )
    base_url = data.get("baseUrl")
    if base_url:
        base_url = str(base_url)
        if not base_url.startswith(("http://", "https://")):
            raise ConfigError(
                f'Profile "{name}" baseUrl must start with http:// or https://',
                kind="bad_base_url",
            )
    return Profile(
        auth_token=str(data["authToken"]),
        organization=str(data["organization"]),
        base_url=base_url or None,
    )


def load_config(root: str | Path) -> SentryConfig:
    """Load and validate connection profiles from ``<root>/.claude/sentry-config.local.md``.

    The file is Markdown with a YAML frontmatter header; only the header is
    read. Malformed YAML propagates as ``yaml.YAMLError``.
    """
    p = config_path(root)
    if not p.is_file():
        raise ConfigError(
            f"Configuration file not found at {p}\n"
            f"Please create {CONFIG_RELATIVE_PATH.as_posix()} with your Sentry profiles.",
            kind="file_not_found",
        )
    header = _extract_frontmatter(p.read_text(encoding="utf-8"))
    raw = yaml.safe_load(header)
    if not isinstance(raw, dict) or not isinstance(raw.get("profiles"), dict):
        raise ConfigError('Configuration must include "profiles" object', kind="missing_profiles")

    profiles = {
        str(name): _parse_profile(str(name), value) for name, value in raw["profiles"].items()
    }

    default_format = raw.get("defaultFormat") or DEFAULT_FORMAT
    if default_format not in OUTPUT_FORMATS:
        raise ConfigError(
            f"defaultFormat must be one of: {', '.join(OUTPUT_FORMATS)}",
            kind="bad_default_format",
        )
    default_profile = raw.get("defaultProfile")
    if not default_profile:
        default_profile = next(iter(profiles), None)

    get_logger().debug("configuration loaded", path=str(p), profiles=len(profiles))
    return SentryConfig(
        profiles=profiles,
        default_profile=str(default_profile) if default_profile else None,
        default_format=str(default_format),
        source_file=p,
    )


def resolve_client_options(config: SentryConfig, profile_name: str) -> ClientOptions:
    profile = config.profiles.get(profile_name)
    if profile is None:
        available = config.profile_names
        raise ProfileNotFoundError(
            f'Profile "{profile_name}" not found. Available profiles: {", ".join(available)}',
            available=available,
        )
    dotenv: dict[str, str] = {}
    if profile.auth_token.startswith("$") or profile.organization.startswith("$"):
        dotenv = read_dotenv(config.source_file.parent.parent)
    return ClientOptions(
        auth_token=resolve_env_reference(profile.auth_token, dotenv=dotenv),
        organization=resolve_env_reference(profile.organization, dotenv=dotenv),
        base_url=profile.base_url or DEFAULT_BASE_URL,
    )


__all__ = [
    "CONFIG_RELATIVE_PATH",
    "DEFAULT_BASE_URL",
    "OUTPUT_FORMATS",
    "ClientOptions",
    "ConfigError",
    "Profile",
    "ProfileNotFoundError",
    "SentryConfig",
    "config_path",
    "find_project_root",
    "load_config",
    "resolve_client_options",
]
