"""GitHub issues client: open issues of one repository."""

from __future__ import annotations

from dataclasses import dataclass

from termiflow.config import DEFAULT_GITHUB_REPO, DEFAULT_HTTP_TIMEOUT
from termiflow.errors import ProtocolError
from termiflow.trackers.http import USER_AGENT, get_json

GITHUB_API_BASE_URL = "https://api.github.com"


@dataclass(frozen=True)
class GitHubIssue:
    number: int
    title: str
    author: str
    state: str


def build_headers(token: str | None) -> dict[str, str]:
    headers = {
        "User-Agent": USER_AGENT,
        "Accept": "application/vnd.github+json",
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def parse_issues(payload: object) -> list[GitHubIssue]:
    if not isinstance(payload, list):
        raise ProtocolError("Malformed GitHub response: expected a list")
    issues = []
    for raw in payload:
        if not isinstance(raw, dict):
            raise ProtocolError("Malformed GitHub response: issue is not an object")
        user = raw.get("user") or {}
        issues.append(
            GitHubIssue(
                number=int(raw.get("number", 0) or 0),
                title=str(raw.get("title", "") or ""),
                author=str(user.get("login", "") if isinstance(user, dict) else ""),
                state=str(raw.get("state", "") or ""),
            )
        )
    return issues


def list_open_issues(
    repo: str | None,
    token: str | None = None,
    per_page: int = 10,
    timeout: float = DEFAULT_HTTP_TIMEOUT,
) -> list[GitHubIssue]:
    """List open issues; `repo` falls back to DEFAULT_GITHUB_REPO when unset."""
    repo = repo or DEFAULT_GITHUB_REPO
    url = f"{GITHUB_API_BASE_URL}/repos/{repo}/issues?state=open&per_page={per_page}"
    return parse_issues(get_json(url, build_headers(token), timeout=timeout))
