"""Error taxonomy & redaction helpers.

Every failure that crosses the dispatch boundary is reduced to a single
human-readable string. This module is the one place that decides what that
string looks like and which secrets are scrubbed from it.

Public API:
- classify_error(exc) -> ErrorInfo
- describe_error(exc) -> str
- redact(text) -> str
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

import requests

from .config import ConfigError
from .sentry_rest import SentryAPIError

_SENSITIVE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"sntry[su]_[A-Za-z0-9+/=_\-]{20,}"),  # org / user auth tokens
    re.compile(r"(?i)(bearer\s+)[A-Za-z0-9._\-+/=]+"),
    re.compile(r"\b[a-f0-9]{64}\b"),  # legacy internal integration tokens
]

_REDACTION_PLACEHOLDER = "<redacted>"

HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403
HTTP_NOT_FOUND = 404
HTTP_TOO_MANY_REQUESTS = 429
HTTP_SERVER_ERROR = 500


@dataclass
class ErrorInfo:
    category: str
    message: str
    original_type: str
    transient: bool = False
    details: dict[str, Any] | None = None


def redact(text: str) -> str:
    """Redact auth tokens in arbitrary text."""
    if not text:
        return text
    redacted = text
    for pat in _SENSITIVE_PATTERNS:
        if pat.groups:
            redacted = pat.sub(lambda m: m.group(1) + _REDACTION_PLACEHOLDER, redacted)
        else:
            redacted = pat.sub(_REDACTION_PLACEHOLDER, redacted)
    return redacted


def _status_of(exc: BaseException) -> int | None:
    status = getattr(exc, "status", None)
    if isinstance(status, int):
        return status
    response = getattr(exc, "response", None)
    code = getattr(response, "status_code", None)
    return code if isinstance(code, int) else None


def classify_error(exc: BaseException) -> ErrorInfo:
    """Best-effort classification of an exception.

    HTTP status wins when the exception carries one; otherwise the exception
    type decides (config errors, requests' network family) with 'generic' as
    the fallback.
    """
    msg = redact(str(exc))
    name = exc.__class__.__name__
    if isinstance(exc, ConfigError):
        return ErrorInfo("config", msg, name, details={"kind": exc.kind})
    status = _status_of(exc)
    if status is not None:
        if status in (HTTP_UNAUTHORIZED, HTTP_FORBIDDEN):
            return ErrorInfo("auth", msg, name, details={"status": status})
        if status == HTTP_NOT_FOUND:
            return ErrorInfo("not_found", msg, name, details={"status": status})
        if status == HTTP_TOO_MANY_REQUESTS:
            return ErrorInfo("rate_limit", msg, name, transient=True, details={"status": status})
        if status >= HTTP_SERVER_ERROR:
            return ErrorInfo("server", msg, name, transient=True, details={"status": status})
    if isinstance(exc, (requests.ConnectionError, requests.Timeout)):
        return ErrorInfo("network", msg, name, transient=True)
    return ErrorInfo("generic", msg, name)


def describe_error(exc: BaseException) -> str:
    """Render an exception as the message shown to the user."""
    if isinstance(exc, SentryAPIError):
        return redact(str(exc))
    if isinstance(exc, requests.Timeout):
        return redact(f"Request timed out: {exc}")
    if isinstance(exc, requests.ConnectionError):
        return redact(f"Network error: {exc}")
    text = str(exc)
    if not text:
        return exc.__class__.__name__
    return redact(f"{exc.__class__.__name__}: {text}")


__all__ = ["ErrorInfo", "classify_error", "describe_error", "redact"]
