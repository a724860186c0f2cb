from __future__ import annotations

from pathlib import Path

from sentrycli.env_auth import read_dotenv, resolve_env_reference


def test_plain_values_pass_through() -> None:
    assert resolve_env_reference("TOKEN", environ={}) == "TOKEN"


def test_dollar_reference_from_environ() -> None:
    assert resolve_env_reference("$SENTRY_TOKEN", environ={"SENTRY_TOKEN": "abc"}) == "abc"


def test_braced_reference_from_environ() -> None:
    assert resolve_env_reference("${SENTRY_TOKEN}", environ={"SENTRY_TOKEN": "abc"}) == "abc"


def test_environment_wins_over_dotenv() -> None:
    value = resolve_env_reference(
        "$SENTRY_TOKEN", environ={"SENTRY_TOKEN": "env"}, dotenv={"SENTRY_TOKEN": "file"}
    )
    assert value == "env"


def test_dotenv_fallback() -> None:
    value = resolve_env_reference("$SENTRY_TOKEN", environ={}, dotenv={"SENTRY_TOKEN": "file"})
    assert value == "file"


def test_unresolved_reference_is_returned_unchanged() -> None:
    assert resolve_env_reference("$MISSING", environ={}, dotenv={}) == "$MISSING"


def test_read_dotenv(tmp_path: Path) -> None:
    assert read_dotenv(tmp_path) == {}
    (tmp_path / ".env").write_text(
        "# comment\nSENTRY_TOKEN=abc\nQUOTED=\"with space\"\nEMPTY_KEY\n", encoding="utf-8"
    )
    values = read_dotenv(tmp_path)
    assert values["SENTRY_TOKEN"] == "abc"
    assert values["QUOTED"] == "with space"
    assert "EMPTY_KEY" not in values
