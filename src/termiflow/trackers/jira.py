"""Jira search client: issues assigned to the current user."""

from __future__ import annotations

import base64
import urllib.parse
from dataclasses import dataclass

from termiflow.config import JiraConfig
from termiflow.errors import ConfigMissing, ProtocolError
from termiflow.trackers.http import USER_AGENT, get_json

ASSIGNED_JQL = "assignee=currentUser()"


@dataclass(frozen=True)
class JiraIssue:
    key: str
    summary: str
    status: str


def build_headers(config: JiraConfig) -> dict[str, str]:
    auth = base64.b64encode(f"{config.email}:{config.token}".encode("utf-8")).decode("ascii")
    return {
        "Authorization": f"Basic {auth}",
        "Accept": "application/json",
        "User-Agent": USER_AGENT,
    }


def build_search_url(config: JiraConfig, max_results: int | None = None) -> str:
    params = {"jql": ASSIGNED_JQL}
    if max_results is not None:
        params["maxResults"] = str(max_results)
    return f"{config.base_url}/rest/api/3/search?{urllib.parse.urlencode(params, safe='=()')}"


def parse_issues(payload: object) -> list[JiraIssue]:
    """Extract (key, summary, status) from a /search response body."""
    if not isinstance(payload, dict) or not isinstance(payload.get("issues"), list):
        raise ProtocolError("Malformed Jira response: missing 'issues'")
    issues = []
    for raw in payload["issues"]:
        if not isinstance(raw, dict):
            raise ProtocolError("Malformed Jira response: issue is not an object")
        fields = raw.get("fields") or {}
        status = fields.get("status") or {}
        issues.append(
            JiraIssue(
                key=str(raw.get("key", "")),
                summary=str(fields.get("summary", "") or ""),
                status=str(status.get("name", "") if isinstance(status, dict) else ""),
            )
        )
    return issues


def search(config: JiraConfig, max_results: int | None = None, timeout: float | None = None) -> list[JiraIssue]:
    """Run the assigned-to-me search.

    Raises:
        ConfigMissing: JIRA_URL / JIRA_EMAIL / JIRA_TOKEN not all set
        ProtocolError, TransportError: see trackers.http.get_json
    """
    if not config.configured:
        raise ConfigMissing("Jira credentials not set (JIRA_URL, JIRA_EMAIL, JIRA_TOKEN)")
    payload = get_json(
        build_search_url(config, max_results),
        build_headers(config),
        timeout=timeout if timeout is not None else config.timeout,
    )
    return parse_issues(payload)
