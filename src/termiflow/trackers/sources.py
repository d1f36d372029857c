"""Tracker sources: bind a tracker client + its config to list rows.

An IssueList pane only knows a TrackerSource: a title, a zero-argument fetch
returning IssueItem rows, and the texts for its placeholder rows.

// [LAW:locality-or-seam] Adding a tracker = one factory here + its client module.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from termiflow.config import GitHubConfig, JiraConfig
from termiflow.messages import IssueItem
from termiflow.trackers import github, jira


@dataclass(frozen=True)
class TrackerSource:
    title: str
    fetch: Callable[[], list[IssueItem]]
    setup_hint: str = ""
    empty_hint: str = "Nothing to show."


def jira_rows(issues: list[jira.JiraIssue]) -> list[IssueItem]:
    return [IssueItem(title=f"{i.key} {i.summary}", description=f"Status: {i.status}") for i in issues]


def github_rows(issues: list[github.GitHubIssue]) -> list[IssueItem]:
    return [IssueItem(title=f"#{i.number} {i.title}", description=f"by {i.author} [{i.state}]") for i in issues]


def jira_source(config: JiraConfig) -> TrackerSource:
    return TrackerSource(
        title="Jira Issues",
        fetch=lambda: jira_rows(jira.search(config)),
        setup_hint="Please set JIRA_URL, JIRA_EMAIL, JIRA_TOKEN",
        empty_hint="You have no assigned issues.",
    )


def github_source(config: GitHubConfig) -> TrackerSource:
    return TrackerSource(
        title=f"GitHub Issues ({config.repo})",
        fetch=lambda: github_rows(
            github.list_open_issues(config.repo, config.token, per_page=10, timeout=config.timeout)
        ),
        setup_hint="Set GITHUB_REPO (and optionally GITHUB_TOKEN)",
        empty_hint="No open issues.",
    )
