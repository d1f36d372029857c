"""Pytest configuration and shared fixtures for termiflow tests."""

from unittest.mock import patch

import pytest


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Point settings and logs at tmp_path and clear tracker/model credentials."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("TERMIFLOW_LOG_DIR", str(tmp_path / "logs"))
    for name in (
        "JIRA_URL",
        "JIRA_EMAIL",
        "JIRA_TOKEN",
        "GITHUB_REPO",
        "GITHUB_TOKEN",
        "GEMINI_API_KEY",
        "GEMINI_MODEL",
        "TERMIFLOW_HTTP_TIMEOUT",
        "TERMIFLOW_MODEL_TIMEOUT",
        "TERMIFLOW_SHELL_TIMEOUT",
        "TERMIFLOW_TOOL_TIMEOUT",
        "TERMIFLOW_LOG_LEVEL",
        "TERMIFLOW_LOG_FILE",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def no_network():
    """Fail loudly if anything reaches urllib."""
    with patch("urllib.request.urlopen", side_effect=AssertionError("network access in test")) as urlopen:
        yield urlopen
