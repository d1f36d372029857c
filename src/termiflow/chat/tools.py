"""Tool catalog for the chat agent.

Tools are fixed, zero-argument data fetches. The catalog is built once at
startup and is read-only afterwards; chat panes hold a reference to it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from types import MappingProxyType

from termiflow.chat.model_service import ToolDeclaration
from termiflow.config import AppConfig
from termiflow.errors import TermiflowError
from termiflow.trackers import github, jira

logger = logging.getLogger(__name__)

ToolInvoke = Callable[[], tuple[object, str | None]]


@dataclass(frozen=True)
class Tool:
    name: str
    description: str
    invoke: ToolInvoke


class ToolCatalog:
    """Immutable name -> Tool mapping."""

    def __init__(self, tools: Iterable[Tool]):
        by_name: dict[str, Tool] = {}
        for t in tools:
            if t.name in by_name:
                raise ValueError(f"Duplicate tool name: {t.name}")
            by_name[t.name] = t
        self._tools = MappingProxyType(by_name)

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[Tool]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)

    def declarations(self) -> tuple[ToolDeclaration, ...]:
        return tuple(ToolDeclaration(t.name, t.description) for t in self._tools.values())


def _guarded(name: str, fetch: Callable[[], object]) -> ToolInvoke:
    """Adapt a raising fetch into the (payload, error) tool contract."""

    def invoke() -> tuple[object, str | None]:
        try:
            return fetch(), None
        except TermiflowError as e:
            logger.info("Tool %s failed: %s", name, e)
            return None, str(e)

    return invoke


def github_issues_payload(issues: list[github.GitHubIssue]) -> dict:
    return {
        "issues": [
            {"number": i.number, "title": i.title, "user": i.author, "state": i.state}
            for i in issues
        ]
    }


def jira_issues_payload(issues: list[jira.JiraIssue]) -> dict:
    return {
        "issues": [
            {"key": i.key, "summary": i.summary, "status": i.status}
            for i in issues
        ]
    }


def build_default_catalog(config: AppConfig) -> ToolCatalog:
    """The two tracker tools, with the short tool timeout and 5 results each."""
    return ToolCatalog([
        Tool(
            name="get_github_issues",
            description="Get list of open GitHub issues for the configured repository.",
            invoke=_guarded(
                "get_github_issues",
                lambda: github_issues_payload(
                    github.list_open_issues(
                        config.github.repo,
                        config.github.token,
                        per_page=5,
                        timeout=config.tool_timeout,
                    )
                ),
            ),
        ),
        Tool(
            name="get_jira_issues",
            description="Get list of Jira issues assigned to the current user.",
            invoke=_guarded(
                "get_jira_issues",
                lambda: jira_issues_payload(
                    jira.search(config.jira, max_results=5, timeout=config.tool_timeout)
                ),
            ),
        ),
    ])
