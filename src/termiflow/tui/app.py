"""Textual host for the pane Composer.

// [LAW:locality-or-seam] Thin adapter: Textual events become runtime
//   Messages, Composer Commands go to the Executor, and Executor results come
//   back through a drain thread. No pane logic lives here.
// [LAW:single-enforcer] route() is the only place the Composer is replaced.
"""

import logging
import queue

from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.css.query import NoMatches
from textual.message import Message
from textual.widgets import Static

import termiflow.io.logging_setup
from termiflow.commands import QUIT, AnyCommand, Executor
from termiflow.messages import KeyEvent, ResizeEvent
from termiflow.runtime import NEXT_PANE_KEY, QUIT_KEY, REINIT_KEY, Composer

logger = logging.getLogger(__name__)

FRAME_ID = "frame"


def _error_notice(error: Exception) -> str:
    notice = f"{type(error).__name__}: {error}"
    runtime = termiflow.io.logging_setup.get_runtime()
    if runtime is not None:
        notice += f"\nSee log: {runtime.file_path}"
    return notice


class _Inbound(Message, bubble=False):
    """Thread-safe bridge: drain thread → app message pump."""

    def __init__(self, message) -> None:
        self.message = message
        super().__init__()


class TermiflowApp(App):
    """Tabbed dashboard: every pane renders into one full-screen frame."""

    CSS = """
    Screen {
        overflow: hidden;
    }
    #frame {
        width: 1fr;
        height: 1fr;
    }
    """

    # Priority so focus traversal and Textual's own ctrl+c handling never see them.
    BINDINGS = [
        Binding(NEXT_PANE_KEY, f"forward_key('{NEXT_PANE_KEY}')", show=False, priority=True),
        Binding(QUIT_KEY, f"forward_key('{QUIT_KEY}')", show=False, priority=True),
        Binding(REINIT_KEY, f"forward_key('{REINIT_KEY}')", show=False, priority=True),
    ]

    def __init__(self, panes, executor: Executor | None = None):
        super().__init__()
        self._composer = Composer.create(panes)
        self._command_executor = executor or Executor(queue.Queue())
        self._stopping = False

    @property
    def composer(self) -> Composer:
        return self._composer

    def compose(self) -> ComposeResult:
        yield Static(id=FRAME_ID)

    def on_mount(self):
        self._composer, init_command = self._composer.init()
        self._run(init_command)
        self.run_worker(self._drain_inbox, thread=True, exclusive=False, name="inbox-drain")
        self.route(ResizeEvent(width=self.size.width, height=self.size.height))
        logger.info("termiflow started with %d panes", len(self._composer.panes))

    def on_unmount(self):
        self._stopping = True
        logger.info("termiflow shutting down")

    # ─── Inbound ───────────────────────────────────────────────────────

    def _drain_inbox(self):
        """Bridge thread: inbox.get → post_message into Textual's message pump."""
        inbox = self._command_executor.inbox
        while not self._stopping:
            try:
                message = inbox.get(timeout=0.25)
            except queue.Empty:
                continue
            self.post_message(_Inbound(message))

    def on__inbound(self, event: _Inbound):
        self.route(event.message)

    def on_key(self, event: events.Key) -> None:
        event.prevent_default()
        event.stop()
        self.route(KeyEvent(key=event.key, character=event.character))

    def on_resize(self, event: events.Resize) -> None:
        self.route(ResizeEvent(width=event.size.width, height=event.size.height))

    def action_forward_key(self, key: str) -> None:
        self.route(KeyEvent(key=key))

    # ─── Dispatch ──────────────────────────────────────────────────────

    def route(self, event) -> None:
        try:
            self._composer, command = self._composer.dispatch(event)
        except Exception as e:
            # Keep the dashboard running; the faulty transition is dropped.
            logger.exception("Unhandled exception dispatching %s", type(event).__name__)
            self.notify(_error_notice(e), severity="error", timeout=5)
            return
        self._run(command)
        self._render_frame()

    def _run(self, command: AnyCommand) -> None:
        if command is QUIT:
            self._stopping = True
            self.exit()
            return
        self._command_executor.run(command)

    def _render_frame(self) -> None:
        try:
            frame = self.query_one(f"#{FRAME_ID}", Static)
        except NoMatches:
            return
        frame.update(self._composer.view())
