"""Textual in-process test harness for termiflow.

Re-exports all public API for convenient imports:
    from tests.harness import run_app, press_and_settle, frame_text, ...
"""

from tests.harness.app_runner import run_app
from tests.harness.interactions import (
    press_and_settle,
    press_sequence,
    type_and_settle,
    resize_and_settle,
    settle_until,
)
from tests.harness.content import frame_text
from tests.harness.builders import (
    FakeModelService,
    FakePane,
    make_catalog,
    make_source,
    make_tool,
    recording_runner,
)

__all__ = [
    "run_app",
    "press_and_settle",
    "press_sequence",
    "type_and_settle",
    "resize_and_settle",
    "settle_until",
    "frame_text",
    "FakeModelService",
    "FakePane",
    "make_catalog",
    "make_source",
    "make_tool",
    "recording_runner",
]
