"""Operation catalog and dispatcher.

Every command is one ``OperationSpec`` row: its required parameters, the query
or body fields passed through to the API, and the client call. ``Dispatcher``
is purely table driven: look up the row, check the required parameters, fetch
the profile's client from the registry, and run the call through ``guarded``,
which turns any transport failure into a failed ``ApiResult``.

Configuration problems (missing file, unknown profile) are not operation
failures; they propagate out of ``invoke`` to the REPL / runner entry points.
``test-connection`` is the exception and reports them as results.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

import yaml

from .config import ConfigError, ProfileNotFoundError
from .errors import classify_error, describe_error
from .formatting import FORMATS, format_result
from .logging import get_logger
from .registry import ClientRegistry
from .sentry_rest import SentryRestClient

OperationCall = Callable[[SentryRestClient, Mapping[str, Any], dict[str, Any]], Any]


@dataclass(frozen=True)
class ApiResult:
    success: bool
    result: str | None = None
    error: str | None = None

    @classmethod
    def ok(cls, result: str) -> ApiResult:
        return cls(success=True, result=result)

    @classmethod
    def fail(cls, error: str) -> ApiResult:
        return cls(success=False, error=error)

    def as_dict(self) -> dict[str, Any]:
        if self.success:
            return {"success": True, "result": self.result}
        return {"success": False, "error": self.error}


@dataclass(frozen=True)
class OperationSpec:
    name: str
    summary: str
    call: OperationCall
    required: tuple[str, ...] = ()
    optional: tuple[str, ...] = ()
    mutation: bool = False
    detail: str = ""
    example: dict[str, Any] = field(default_factory=dict)


def _connection_probe(
    client: SentryRestClient, params: Mapping[str, Any], _: dict[str, Any]
) -> Any:
    org = client.get_organization()
    org = org if isinstance(org, dict) else {}
    return {
        "connected": True,
        "profile": params.get("profile"),
        "organization": org.get("slug") or client.organization,
        "name": org.get("name"),
        "baseUrl": client.base_url,
    }


_ISSUE_UPDATE_FIELDS = (
    "status",
    "statusDetails",
    "substatus",
    "assignedTo",
    "hasSeen",
    "isBookmarked",
    "isSubscribed",
    "isPublic",
)

_OPERATIONS: tuple[OperationSpec, ...] = (
    OperationSpec(
        name="list-project-events",
        summary="List error events for a project",
        required=("projectSlug",),
        optional=("full", "cursor", "statsPeriod", "start", "end"),
        call=lambda c, p, o: c.list_project_events(p["projectSlug"], o),
        detail="Optional: full (bool), cursor, statsPeriod (e.g. 24h), start, end",
        example={"projectSlug": "my-project", "statsPeriod": "24h"},
    ),
    OperationSpec(
        name="list-project-issues",
        summary="List issues for a project",
        required=("projectSlug",),
        optional=("query", "statsPeriod", "shortIdLookup", "cursor"),
        call=lambda c, p, o: c.list_project_issues(p["projectSlug"], o),
        detail="Optional: query (e.g. is:unresolved), statsPeriod, shortIdLookup, cursor",
        example={"projectSlug": "my-project", "query": "is:unresolved"},
    ),
    OperationSpec(
        name="list-org-issues",
        summary="List issues across the organization",
        optional=(
            "query",
            "statsPeriod",
            "start",
            "end",
            "project",
            "environment",
            "sort",
            "limit",
            "cursor",
            "expand",
            "collapse",
        ),
        call=lambda c, p, o: c.list_org_issues(o),
        detail=(
            "Optional: query, statsPeriod, start, end, project (id or list of ids),\n"
            "environment, sort (date|new|freq|user), limit, cursor, expand, collapse"
        ),
        example={"query": "is:unresolved", "limit": 25},
    ),
    OperationSpec(
        name="get-issue",
        summary="Retrieve a single issue",
        required=("issueId",),
        call=lambda c, p, o: c.get_issue(p["issueId"]),
        example={"issueId": "123456789"},
    ),
    OperationSpec(
        name="update-issue",
        summary="Update issue status, assignment, or flags",
        required=("issueId",),
        optional=_ISSUE_UPDATE_FIELDS,
        mutation=True,
        call=lambda c, p, o: c.update_issue(p["issueId"], o),
        detail=(
            "Fields: status (resolved|unresolved|ignored), statusDetails, substatus,\n"
            "assignedTo (user or team:<id>), hasSeen, isBookmarked, isSubscribed, isPublic"
        ),
        example={"issueId": "123456789", "status": "resolved"},
    ),
    OperationSpec(
        name="list-issue-events",
        summary="List events recorded for an issue",
        required=("issueId",),
        optional=("full", "environment", "query", "statsPeriod", "start", "end", "cursor"),
        call=lambda c, p, o: c.list_issue_events(p["issueId"], o),
        detail="Optional: full, environment, query, statsPeriod, start, end, cursor",
        example={"issueId": "123456789"},
    ),
    OperationSpec(
        name="get-event",
        summary="Retrieve a project event by id",
        required=("projectSlug", "eventId"),
        call=lambda c, p, o: c.get_event(p["projectSlug"], p["eventId"]),
        example={"projectSlug": "my-project", "eventId": "9fac2ceed9344f2bbfdd1fdacb0ed9b1"},
    ),
    OperationSpec(
        name="get-issue-event",
        summary="Retrieve an event of an issue",
        required=("issueId", "eventId"),
        optional=("environment",),
        call=lambda c, p, o: c.get_issue_event(p["issueId"], p["eventId"], o),
        detail="eventId accepts an event id or one of: latest, oldest, recommended",
        example={"issueId": "123456789", "eventId": "latest"},
    ),
    OperationSpec(
        name="get-tag-details",
        summary="Show value distribution for an issue tag",
        required=("issueId", "tagKey"),
        optional=("environment",),
        call=lambda c, p, o: c.get_tag_details(p["issueId"], p["tagKey"], o),
        example={"issueId": "123456789", "tagKey": "browser"},
    ),
    OperationSpec(
        name="list-tag-values",
        summary="List values seen for an issue tag",
        required=("issueId", "tagKey"),
        optional=("sort", "environment", "cursor"),
        call=lambda c, p, o: c.list_tag_values(p["issueId"], p["tagKey"], o),
        example={"issueId": "123456789", "tagKey": "release"},
    ),
    OperationSpec(
        name="list-issue-hashes",
        summary="List grouping hashes merged into an issue",
        required=("issueId",),
        optional=("full", "cursor"),
        call=lambda c, p, o: c.list_issue_hashes(p["issueId"], o),
        example={"issueId": "123456789"},
    ),
    OperationSpec(
        name="debug-source-maps",
        summary="Diagnose source map resolution for an event",
        required=("projectSlug", "eventId"),
        optional=("frame_idx", "exception_idx"),
        call=lambda c, p, o: c.debug_source_maps(p["projectSlug"], p["eventId"], o),
        detail="Optional: frame_idx, exception_idx (both default to the first frame)",
        example={"projectSlug": "my-project", "eventId": "9fac2ceed9344f2bbfdd1fdacb0ed9b1"},
    ),
    OperationSpec(
        name="test-connection",
        summary="Verify credentials and organization access",
        call=_connection_probe,
    ),
)

OPERATIONS: dict[str, OperationSpec] = {op.name: op for op in _OPERATIONS}
COMMANDS: tuple[str, ...] = tuple(op.name for op in _OPERATIONS)


def is_missing(value: Any) -> bool:
    return value is None or value == ""


def missing_params(spec: OperationSpec, params: Mapping[str, Any]) -> list[str]:
    return [name for name in spec.required if is_missing(params.get(name))]


def required_message(required: tuple[str, ...]) -> str:
    names = " and ".join(f'"{name}"' for name in required)
    noun = "parameter is" if len(required) == 1 else "parameters are"
    return f"ERROR: {names} {noun} required"


def pick_options(spec: OperationSpec, params: Mapping[str, Any]) -> dict[str, Any]:
    """Select the optional fields the caller supplied.

    Mutation bodies keep explicit nulls (``assignedTo: null`` unassigns); query
    options drop them.
    """
    if spec.mutation:
        return {k: params[k] for k in spec.optional if k in params}
    return {k: params[k] for k in spec.optional if params.get(k) is not None}


def guarded(fn: Callable[[], Any], output_format: str) -> ApiResult:
    """Run a remote call and render it; any failure becomes ``ApiResult.fail``."""
    try:
        payload = fn()
        return ApiResult.ok(format_result(payload, output_format))
    except Exception as exc:  # noqa: BLE001 - nothing escapes the dispatch boundary
        info = classify_error(exc)
        get_logger().info(
            "operation failed", category=info.category, error_type=info.original_type
        )
        return ApiResult.fail(describe_error(exc))


class Dispatcher:
    def __init__(
        self,
        registry: ClientRegistry,
        operations: Mapping[str, OperationSpec] | None = None,
    ) -> None:
        self.registry = registry
        self.operations = OPERATIONS if operations is None else operations
        self.logger = get_logger()

    def invoke(
        self,
        command: str,
        profile: str,
        params: Mapping[str, Any] | None = None,
        output_format: str = "json",
    ) -> ApiResult:
        params = dict(params or {})
        spec = self.operations.get(command)
        if spec is None:
            return ApiResult.fail(f"Unknown command: {command}")
        if missing_params(spec, params):
            return ApiResult.fail(required_message(spec.required))
        if output_format not in FORMATS:
            return ApiResult.fail(
                f'ERROR: Invalid format "{output_format}". Choose: {" or ".join(FORMATS)}'
            )
        with self.logger.timed_operation(
            "dispatch", command=command, profile=profile, mutation=spec.mutation
        ):
            if spec.name == "test-connection":
                return self._test_connection(spec, profile, output_format)
            client = self.registry.get_client(profile)
            options = pick_options(spec, params)
            return guarded(lambda: spec.call(client, params, options), output_format)

    def _test_connection(self, spec: OperationSpec, profile: str, output_format: str) -> ApiResult:
        try:
            client = self.registry.get_client(profile)
        except ProfileNotFoundError as exc:
            return ApiResult.fail(str(exc))
        except (ConfigError, yaml.YAMLError) as exc:
            return ApiResult.fail(f"Configuration error: {exc}")
        result = guarded(lambda: spec.call(client, {"profile": profile}, {}), output_format)
        if result.success:
            return result
        return ApiResult.fail(f'Connection failed for profile "{profile}": {result.error}')


def render_command_list() -> str:
    lines = ["", "Available Sentry commands:"]
    for idx, op in enumerate(_OPERATIONS, start=1):
        lines.append(f"{idx}. {op.name}: {op.summary}")
    return "\n".join(lines)


def render_command_detail(name: str) -> str:
    name = (name or "").strip()
    if not name:
        return "Please provide a command name.\n" + render_command_list()
    spec = OPERATIONS.get(name)
    if spec is None:
        return f"Unknown command: {name}\n" + render_command_list()
    lines = [spec.name, spec.summary]
    if spec.required:
        lines.append("Required: " + ", ".join(spec.required))
    if spec.detail:
        lines.append(spec.detail)
    if spec.mutation:
        lines.append("Modifies remote state.")
    if spec.example:
        lines.append(f"Example: {spec.name} '{json.dumps(spec.example)}'")
    return "\n".join(lines)


__all__ = [
    "COMMANDS",
    "OPERATIONS",
    "ApiResult",
    "Dispatcher",
    "OperationSpec",
    "guarded",
    "missing_params",
    "render_command_detail",
    "render_command_list",
    "required_message",
]
