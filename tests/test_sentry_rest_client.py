from __future__ import annotations

import pytest

from sentrycli import __version__
from sentrycli.sentry_rest import SentryAPIError, SentryRestClient, clean_params

from conftest import DummySession


def _client(session: DummySession, **kw) -> SentryRestClient:
    return SentryRestClient(token="tok", organization="acme", session=session, **kw)  # type: ignore[arg-type]


def test_headers_are_set(session: DummySession) -> None:
    _client(session)
    assert session.headers["Authorization"] == "Bearer tok"
    assert session.headers["Accept"] == "application/json"
    assert session.headers["User-Agent"] == f"sentry-api-cli/{__version__}"


def test_default_session_headers_are_overridden() -> None:
    client = SentryRestClient(token="tok", organization="acme")
    try:
        headers = client._session.headers
        assert headers["Accept"] == "application/json"
        assert headers["User-Agent"] == f"sentry-api-cli/{__version__}"
        assert headers["Authorization"] == "Bearer tok"
    finally:
        client.close()


def test_repr_hides_token(session: DummySession) -> None:
    text = repr(_client(session))
    assert "tok" not in text
    assert "acme" in text


def test_get_organization(session: DummySession) -> None:
    session.queue(200, {"slug": "acme"})
    assert _client(session).get_organization() == {"slug": "acme"}
    call = session.request_log[0]
    assert call["method"] == "GET"
    assert call["url"] == "https://sentry.io/api/0/organizations/acme/"
    assert call["timeout"] == 30


def test_base_url_trailing_slash_is_normalized(session: DummySession) -> None:
    session.queue(200, {})
    _client(session, base_url="https://self.hosted/api/0/").get_issue("1")
    assert session.request_log[0]["url"] == "https://self.hosted/api/0/organizations/acme/issues/1/"


def test_path_segments_are_escaped(session: DummySession) -> None:
    session.queue(200, {})
    _client(session).get_tag_details("1", "sentry:release")
    assert session.request_log[0]["url"].endswith("/issues/1/tags/sentry%3Arelease/")


def test_list_project_issues_params(session: DummySession) -> None:
    session.queue(200, [])
    _client(session).list_project_issues("web", {"query": "is:unresolved", "cursor": None})
    call = session.request_log[0]
    assert call["url"] == "https://sentry.io/api/0/projects/acme/web/issues/"
    assert call["params"] == {"query": "is:unresolved"}


def test_update_issue_uses_put(session: DummySession) -> None:
    session.queue(200, {"status": "ignored"})
    out = _client(session).update_issue("9", {"status": "ignored"})
    assert out == {"status": "ignored"}
    assert session.request_log[0]["method"] == "PUT"
    assert session.request_log[0]["json"] == {"status": "ignored"}


def test_empty_body_returns_none(session: DummySession) -> None:
    session.queue(204, None)
    assert _client(session).update_issue("9", {"hasSeen": True}) is None


def test_non_json_body_returns_text(session: DummySession) -> None:
    session.queue(200, "plain text")
    assert _client(session).get_issue("1") == "plain text"


def test_error_uses_detail_field(session: DummySession) -> None:
    session.queue(403, {"detail": "You do not have permission"})
    with pytest.raises(SentryAPIError) as excinfo:
        _client(session).get_issue("1")
    err = excinfo.value
    assert err.status == 403
    assert str(err) == (
        "Sentry API GET /organizations/acme/issues/1/ failed with 403: "
        "You do not have permission"
    )


def test_error_falls_back_to_text_then_reason(session: DummySession) -> None:
    session.queue(502, "<html>bad gateway</html>")
    with pytest.raises(SentryAPIError, match="failed with 502: <html>bad gateway</html>"):
        _client(session).get_issue("1")

    session.queue(500, None, reason="Internal Server Error")
    with pytest.raises(SentryAPIError, match="failed with 500: Internal Server Error"):
        _client(session).get_issue("1")


def test_long_error_text_is_trimmed(session: DummySession) -> None:
    session.queue(500, "x" * 1000)
    with pytest.raises(SentryAPIError) as excinfo:
        _client(session).get_issue("1")
    assert str(excinfo.value).endswith("x" * 300 + "...")
    assert excinfo.value.response_text == "x" * 1000


def test_close_closes_session(session: DummySession) -> None:
    _client(session).close()
    assert session.closed


def test_clean_params() -> None:
    assert clean_params(None) == {}
    assert clean_params({"a": None, "b": True, "c": False, "d": 3}) == {
        "b": "true",
        "c": "false",
        "d": 3,
    }
    assert clean_params({"project": [1, 2], "flags": [True]}) == {
        "project": [1, 2],
        "flags": ["true"],
    }
