"""sentrycli - Sentry API client with pooled per-profile connections.

High-level public API:

from sentrycli import ClientRegistry, Dispatcher

registry = ClientRegistry('/path/to/project')   # reads .claude/sentry-config.local.md
dispatcher = Dispatcher(registry)
result = dispatcher.invoke('get-issue', 'production', {'issueId': '123'}, 'toon')
print(result.result if result.success else result.error)
registry.clear_all()

The CLI (``sentry-api-cli`` / ``python -m sentrycli``) is a thin layer over
these objects.
"""

from __future__ import annotations

# x-release-please-version
__version__ = "1.2.0"

from .config import (  # noqa: E402
    ClientOptions,
    ConfigError,
    Profile,
    ProfileNotFoundError,
    SentryConfig,
    load_config,
    resolve_client_options,
)
from .formatting import format_result  # noqa: E402
from .operations import COMMANDS, ApiResult, Dispatcher  # noqa: E402
from .registry import ClientRegistry  # noqa: E402

__all__ = [
    "COMMANDS",
    "ApiResult",
    "ClientOptions",
    "ClientRegistry",
    "ConfigError",
    "Dispatcher",
    "Profile",
    "ProfileNotFoundError",
    "SentryConfig",
    "format_result",
    "load_config",
    "resolve_client_options",
    "__version__",
]
