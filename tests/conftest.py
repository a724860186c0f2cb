"""Pytest configuration for sentrycli tests.

Ensures the in-repo `src` directory is on `sys.path` so the package can be
imported without an editable install, and provides a fake HTTP session so no
test ever reaches the network.
"""

from __future__ import annotations

import json
import os
import sys
import textwrap
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

# Subprocess tests (python -m sentrycli) need the same import path.
py_path = os.environ.get("PYTHONPATH", "")
parts = [p for p in py_path.split(os.pathsep) if p]
if str(SRC) not in parts:
    parts.insert(0, str(SRC))
    os.environ["PYTHONPATH"] = os.pathsep.join(parts)

from sentrycli import logging as sentry_logging  # noqa: E402
from sentrycli.registry import ClientRegistry  # noqa: E402
from sentrycli.sentry_rest import SentryRestClient  # noqa: E402

BASIC_CONFIG = textwrap.dedent(
    """\
    ---
    profiles:
      test:
        authToken: TEST_TOKEN
        organization: test-org
        baseUrl: https://sentry.io/api/0
      staging:
        authToken: STAGING_TOKEN
        organization: staging-org
        baseUrl: https://staging.sentry.io/api/0

    defaultProfile: test
    defaultFormat: json
    ---

    # Sentry Connection Profiles
    """
)


def write_config(root: Path, content: str) -> Path:
    path = root / ".claude" / "sentry-config.local.md"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


class DummyResponse:
    def __init__(self, status_code: int, payload: Any = None, reason: str = "") -> None:
        self.status_code = status_code
        self.payload = payload
        self.reason = reason

    def json(self) -> Any:
        if isinstance(self.payload, Exception):
            raise self.payload
        if isinstance(self.payload, (dict, list)):
            return self.payload
        return json.loads(str(self.payload))

    @property
    def text(self) -> str:
        if self.payload is None:
            return ""
        if isinstance(self.payload, (dict, list)):
            return json.dumps(self.payload)
        return str(self.payload)


class DummySession:
    def __init__(self) -> None:
        self.responses: list[DummyResponse] = []
        self.request_log: list[dict[str, Any]] = []
        self.headers: dict[str, str] = {}
        self.error: Exception | None = None
        self.closed = False

    def queue(self, status_code: int, payload: Any = None, reason: str = "") -> None:
        self.responses.append(DummyResponse(status_code, payload, reason))

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str],
        params: dict[str, Any] | None = None,
        json: Any | None = None,
        timeout: float | None = None,
    ) -> DummyResponse:
        self.request_log.append(
            {"method": method, "url": url, "params": params, "json": json, "timeout": timeout}
        )
        if self.error is not None:
            raise self.error
        if not self.responses:
            raise AssertionError("No response queued for request")
        return self.responses.pop(0)

    def close(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in ("CLAUDE_PROJECT_ROOT", "SENTRY_CLI_LOG_LEVEL", "SENTRY_CLI_LOG_JSON"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr(sentry_logging, "_GLOBAL", None)


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    write_config(tmp_path, BASIC_CONFIG)
    return tmp_path


@pytest.fixture
def make_config(tmp_path: Path) -> Callable[[str], Path]:
    def _make(content: str) -> Path:
        write_config(tmp_path, content)
        return tmp_path

    return _make


@pytest.fixture
def session() -> DummySession:
    return DummySession()


@pytest.fixture
def registry(project_root: Path, session: DummySession) -> Iterator[ClientRegistry]:
    def factory(options: Any) -> SentryRestClient:
        return SentryRestClient(
            token=options.auth_token,
            organization=options.organization,
            base_url=options.base_url,
            session=session,  # type: ignore[arg-type]
        )

    reg = ClientRegistry(project_root, client_factory=factory)
    yield reg
    reg.clear_all()
