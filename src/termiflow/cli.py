"""CLI entry point for termiflow."""

import argparse
import logging

import termiflow.config
import termiflow.io.logging_setup
from termiflow.chat.model_service import GeminiService
from termiflow.chat.tools import build_default_catalog
from termiflow.panes.chat import ChatPane
from termiflow.panes.issues import IssueListPane
from termiflow.panes.shell import ShellPane
from termiflow.trackers.sources import github_source, jira_source
from termiflow.tui.app import TermiflowApp

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="termiflow",
        description="Terminal dashboard: shell, Jira and GitHub issues, and a Gemini chat agent",
    )
    parser.add_argument(
        "--github-repo",
        type=str,
        default=None,
        help=f"owner/name of the GitHub repository to list (default: $GITHUB_REPO or {termiflow.config.DEFAULT_GITHUB_REPO})",
    )
    parser.add_argument(
        "--model",
        type=str,
        default=None,
        help=f"Gemini model name (default: $GEMINI_MODEL or {termiflow.config.DEFAULT_GEMINI_MODEL})",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Log level for the log file (default: $TERMIFLOW_LOG_LEVEL or INFO)",
    )
    return parser


def overrides_from_args(args: argparse.Namespace) -> dict[str, str]:
    """Map CLI flags onto the env-var keys config resolution uses."""
    overrides = {}
    if args.github_repo:
        overrides["GITHUB_REPO"] = args.github_repo
    if args.model:
        overrides["GEMINI_MODEL"] = args.model
    return overrides


def build_panes(config: termiflow.config.AppConfig) -> list:
    service = GeminiService(config.chat)
    catalog = build_default_catalog(config)
    return [
        ShellPane.create(timeout=config.shell.timeout),
        IssueListPane.create(jira_source(config.jira)),
        IssueListPane.create(github_source(config.github)),
        ChatPane(service=service, catalog=catalog),
    ]


def main(argv=None):
    args = build_parser().parse_args(argv)

    # [LAW:single-enforcer] Runtime logger configuration is centralized in io.logging_setup.
    log_runtime = termiflow.io.logging_setup.configure(args.log_level)
    logger.info(
        "logging configured level=%s file=%s",
        log_runtime.level_name,
        log_runtime.file_path,
    )

    config = termiflow.config.load_config(overrides=overrides_from_args(args))
    logger.info(
        "config resolved jira=%s github_repo=%s model=%s chat=%s",
        "configured" if config.jira.configured else "missing",
        config.github.repo,
        config.chat.model,
        "configured" if config.chat.configured else "missing",
    )

    app = TermiflowApp(build_panes(config))
    app.run()
    logger.info("termiflow exited")
