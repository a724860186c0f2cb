from __future__ import annotations

import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

import requests

from . import __version__
from .logging import get_logger

DEFAULT_API_URL = "https://sentry.io/api/0"
USER_AGENT = f"sentry-api-cli/{__version__}"
HTTP_ERROR_STATUS = 400
REQUEST_TIMEOUT = 30
_DETAIL_LIMIT = 300


class SentryAPIError(RuntimeError):
    """Raised when the Sentry REST API returns an error status."""

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        response_text: str | None = None,
    ):
        super().__init__(message)
        self.status = status
        self.response_text = response_text


def _seg(value: Any) -> str:
    return quote(str(value), safe="")


def _query_value(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return [_query_value(v) for v in value]
    return value


def clean_params(params: Mapping[str, Any] | None) -> dict[str, Any]:
    """Drop unset values and render booleans the way the API expects them."""
    if not params:
        return {}
    return {k: _query_value(v) for k, v in params.items() if v is not None}


def _error_detail(response: requests.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and data.get("detail"):
        return str(data["detail"])
    text = (response.text or "").strip()
    if len(text) > _DETAIL_LIMIT:
        text = text[:_DETAIL_LIMIT] + "..."
    return text or (response.reason or "")


@dataclass
class SentryRestClient:
    """Authenticated REST client bound to one organization."""

    token: str = field(repr=False)
    organization: str
    base_url: str = DEFAULT_API_URL
    timeout: float = REQUEST_TIMEOUT
    session: requests.Session | None = None
    _session: requests.Session = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._session = self.session or requests.Session()
        # requests.Session ships its own Accept and User-Agent defaults
        self._session.headers.update(
            {
                "Authorization": f"Bearer {self.token}",
                "Accept": "application/json",
                "User-Agent": USER_AGENT,
            }
        )

    def close(self) -> None:
        self._session.close()

    # ---- transport ----------------------------------------------------
    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json_body: Any | None = None,
    ) -> Any:
        url = f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"
        start = time.perf_counter()
        response = self._session.request(
            method,
            url,
            params=clean_params(params),
            json=json_body,
            headers=self._session.headers,
            timeout=self.timeout,
        )
        get_logger().log_request(
            method, path, response.status_code, (time.perf_counter() - start) * 1000
        )
        if response.status_code >= HTTP_ERROR_STATUS:
            raise SentryAPIError(
                f"Sentry API {method} {path} failed with {response.status_code}: "
                f"{_error_detail(response)}",
                status=response.status_code,
                response_text=response.text,
            )
        if response.text:
            try:
                return response.json()
            except ValueError:
                return response.text
        return None

    def _org(self) -> str:
        return _seg(self.organization)

    # ---- organization -------------------------------------------------
    def get_organization(self) -> Any:
        return self._request("GET", f"/organizations/{self._org()}/")

    def list_org_issues(self, params: Mapping[str, Any] | None = None) -> Any:
        return self._request("GET", f"/organizations/{self._org()}/issues/", params=params)

    # ---- projects -----------------------------------------------------
    def list_project_events(
        self, project_slug: str, params: Mapping[str, Any] | None = None
    ) -> Any:
        return self._request(
            "GET", f"/projects/{self._org()}/{_seg(project_slug)}/events/", params=params
        )

    def list_project_issues(
        self, project_slug: str, params: Mapping[str, Any] | None = None
    ) -> Any:
        return self._request(
            "GET", f"/projects/{self._org()}/{_seg(project_slug)}/issues/", params=params
        )

    def get_event(self, project_slug: str, event_id: str) -> Any:
        return self._request(
            "GET", f"/projects/{self._org()}/{_seg(project_slug)}/events/{_seg(event_id)}/"
        )

    def debug_source_maps(
        self, project_slug: str, event_id: str, params: Mapping[str, Any] | None = None
    ) -> Any:
        return self._request(
            "GET",
            f"/projects/{self._org()}/{_seg(project_slug)}/events/{_seg(event_id)}"
            "/source-map-debug/",
            params=params,
        )

    # ---- issues -------------------------------------------------------
    def _issue_path(self, issue_id: str) -> str:
        return f"/organizations/{self._org()}/issues/{_seg(issue_id)}"

    def get_issue(self, issue_id: str) -> Any:
        return self._request("GET", f"{self._issue_path(issue_id)}/")

    def update_issue(self, issue_id: str, changes: Mapping[str, Any]) -> Any:
        return self._request("PUT", f"{self._issue_path(issue_id)}/", json_body=dict(changes))

    def list_issue_events(self, issue_id: str, params: Mapping[str, Any] | None = None) -> Any:
        return self._request("GET", f"{self._issue_path(issue_id)}/events/", params=params)

    def get_issue_event(
        self, issue_id: str, event_id: str, params: Mapping[str, Any] | None = None
    ) -> Any:
        return self._request(
            "GET", f"{self._issue_path(issue_id)}/events/{_seg(event_id)}/", params=params
        )

    def get_tag_details(
        self, issue_id: str, tag_key: str, params: Mapping[str, Any] | None = None
    ) -> Any:
        return self._request(
            "GET", f"{self._issue_path(issue_id)}/tags/{_seg(tag_key)}/", params=params
        )

    def list_tag_values(
        self, issue_id: str, tag_key: str, params: Mapping[str, Any] | None = None
    ) -> Any:
        return self._request(
            "GET", f"{self._issue_path(issue_id)}/tags/{_seg(tag_key)}/values/", params=params
        )

    def list_issue_hashes(self, issue_id: str, params: Mapping[str, Any] | None = None) -> Any:
        return self._request("GET", f"{self._issue_path(issue_id)}/hashes/", params=params)


__all__ = ["SentryAPIError", "SentryRestClient", "clean_params"]
