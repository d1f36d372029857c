"""Resolved runtime configuration.

// [LAW:one-source-of-truth] Every credential/setting is resolved here once at
//   startup: explicit override > environment > settings.json > default.
// Panes and collaborators receive frozen config objects, never os.environ.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

import termiflow.settings

DEFAULT_GITHUB_REPO = "charmbracelet/bubbletea"
DEFAULT_GEMINI_MODEL = "gemini-1.5-flash-002"
DEFAULT_HTTP_TIMEOUT = 10.0
DEFAULT_TOOL_TIMEOUT = 5.0
DEFAULT_SHELL_TIMEOUT = 30.0
DEFAULT_MODEL_TIMEOUT = 60.0


@dataclass(frozen=True)
class JiraConfig:
    base_url: str = ""
    email: str = ""
    token: str = field(default="", repr=False)
    timeout: float = DEFAULT_HTTP_TIMEOUT

    @property
    def configured(self) -> bool:
        return bool(self.base_url and self.email and self.token)


@dataclass(frozen=True)
class GitHubConfig:
    repo: str = DEFAULT_GITHUB_REPO
    token: str = field(default="", repr=False)
    timeout: float = DEFAULT_HTTP_TIMEOUT


@dataclass(frozen=True)
class ChatConfig:
    api_key: str = field(default="", repr=False)
    model: str = DEFAULT_GEMINI_MODEL
    timeout: float = DEFAULT_MODEL_TIMEOUT

    @property
    def configured(self) -> bool:
        return bool(self.api_key)


@dataclass(frozen=True)
class ShellConfig:
    timeout: float = DEFAULT_SHELL_TIMEOUT


@dataclass(frozen=True)
class AppConfig:
    jira: JiraConfig = field(default_factory=JiraConfig)
    github: GitHubConfig = field(default_factory=GitHubConfig)
    chat: ChatConfig = field(default_factory=ChatConfig)
    shell: ShellConfig = field(default_factory=ShellConfig)
    tool_timeout: float = DEFAULT_TOOL_TIMEOUT


def _pick(key: str, env: Mapping[str, str], file_settings: Mapping, overrides: Mapping, default: str = "") -> str:
    # Settings file keys are the lowercase form of the env var name.
    for source, name in ((overrides, key), (env, key), (file_settings, key.lower())):
        value = source.get(name)
        if value not in (None, ""):
            return str(value).strip()
    return default


def _pick_float(key: str, env, file_settings, overrides, default: float) -> float:
    raw = _pick(key, env, file_settings, overrides)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def load_config(
    env: Mapping[str, str] | None = None,
    file_settings: Mapping | None = None,
    overrides: Mapping[str, str] | None = None,
) -> AppConfig:
    """Resolve the full AppConfig.

    Args:
        env: Environment mapping (default: os.environ)
        file_settings: Parsed settings.json (default: termiflow.settings.load_settings())
        overrides: Explicit values (CLI flags), keyed by env var name
    """
    env = os.environ if env is None else env
    file_settings = termiflow.settings.load_settings() if file_settings is None else file_settings
    overrides = overrides or {}

    def pick(key: str, default: str = "") -> str:
        return _pick(key, env, file_settings, overrides, default)

    http_timeout = _pick_float("TERMIFLOW_HTTP_TIMEOUT", env, file_settings, overrides, DEFAULT_HTTP_TIMEOUT)

    return AppConfig(
        jira=JiraConfig(
            base_url=pick("JIRA_URL").rstrip("/"),
            email=pick("JIRA_EMAIL"),
            token=pick("JIRA_TOKEN"),
            timeout=http_timeout,
        ),
        github=GitHubConfig(
            repo=pick("GITHUB_REPO", DEFAULT_GITHUB_REPO),
            token=pick("GITHUB_TOKEN"),
            timeout=http_timeout,
        ),
        chat=ChatConfig(
            api_key=pick("GEMINI_API_KEY"),
            model=pick("GEMINI_MODEL", DEFAULT_GEMINI_MODEL),
            timeout=_pick_float("TERMIFLOW_MODEL_TIMEOUT", env, file_settings, overrides, DEFAULT_MODEL_TIMEOUT),
        ),
        shell=ShellConfig(
            timeout=_pick_float("TERMIFLOW_SHELL_TIMEOUT", env, file_settings, overrides, DEFAULT_SHELL_TIMEOUT),
        ),
        tool_timeout=_pick_float("TERMIFLOW_TOOL_TIMEOUT", env, file_settings, overrides, DEFAULT_TOOL_TIMEOUT),
    )
