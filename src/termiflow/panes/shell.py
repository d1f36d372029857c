"""Shell pane: line-oriented command runner with its own working directory.

`cd` and `clear` are handled inline (no I/O beyond a stat). Every other line
runs as a Command via the process-exec collaborator so a long-running
program never blocks the render loop; one program runs at a time.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from enum import Enum
from functools import partial

from rich.text import Text

import termiflow.process
import termiflow.tui.styles as styles
from termiflow.commands import AnyCommand, Command
from termiflow.config import DEFAULT_SHELL_TIMEOUT
from termiflow.errors import UserInputError
from termiflow.messages import CommandCrashed, KeyEvent, Message, ShellOutput
from termiflow.panes.base import edit_line, join_lines, tail

ProcessRunner = Callable[[str, list[str], str, float], tuple[str, str | None]]


class EntryKind(Enum):
    INFO = "info"
    PROMPT = "prompt"
    OUTPUT = "output"
    ERROR = "error"


@dataclass(frozen=True)
class TranscriptEntry:
    kind: EntryKind
    text: str
    # Basename of the working directory, PROMPT entries only.
    directory: str = ""


def _basename(path: str) -> str:
    return os.path.basename(os.path.normpath(path)) or path


def resolve_cd(current: str, args: list[str]) -> str:
    """Resolve a `cd` target to a normalized absolute directory.

    Raises:
        UserInputError: the target does not exist or is not a directory
    """
    if args:
        raw = args[0]
        target = os.path.expanduser(raw)
    else:
        raw = target = os.path.expanduser("~")
    if not os.path.isabs(target):
        target = os.path.join(current, target)
    target = os.path.normpath(target)
    if not os.path.isdir(target):
        raise UserInputError(f"cd: {raw}: No such directory")
    return target


def run_line(run_process: ProcessRunner, line: str, cwd: str, timeout: float) -> ShellOutput:
    """Command work: execute one input line in `cwd`."""
    parts = line.split()
    output, error = run_process(parts[0], parts[1:], cwd, timeout)
    return ShellOutput(command=line, output=output, error=error)


@dataclass(frozen=True)
class ShellPane:
    current_directory: str
    transcript: tuple[TranscriptEntry, ...] = ()
    input: str = ""
    running: str | None = None
    timeout: float = DEFAULT_SHELL_TIMEOUT
    width: int = 80
    height: int = 20
    title: str = "Shell"
    run_process: ProcessRunner = field(default=termiflow.process.run, repr=False, compare=False)

    @classmethod
    def create(cls, cwd: str | None = None, **kwargs) -> ShellPane:
        cwd = os.path.abspath(cwd or os.getcwd())
        welcome = (
            TranscriptEntry(EntryKind.INFO, "Welcome to TermiFlow Shell!"),
            TranscriptEntry(EntryKind.INFO, f"Current Directory: {cwd}"),
        )
        return cls(current_directory=cwd, transcript=welcome, **kwargs)

    def init(self) -> tuple[ShellPane, AnyCommand]:
        return self, None

    def resize(self, width: int, height: int) -> ShellPane:
        return replace(self, width=width, height=height)

    # ─── Update ────────────────────────────────────────────────────────

    def update(self, message: Message) -> tuple[ShellPane, AnyCommand]:
        if isinstance(message, KeyEvent):
            if message.key == "enter":
                return self._submit()
            edited = edit_line(self.input, message)
            if edited is None:
                return self, None
            return replace(self, input=edited), None
        if isinstance(message, ShellOutput):
            entries = []
            if message.output:
                entries.append(TranscriptEntry(EntryKind.OUTPUT, message.output))
            if message.error is not None:
                entries.append(TranscriptEntry(EntryKind.ERROR, f"Error: {message.error}"))
            return replace(self, transcript=self.transcript + tuple(entries), running=None), None
        if isinstance(message, CommandCrashed):
            entry = TranscriptEntry(EntryKind.ERROR, f"Error: {message.error}")
            return replace(self, transcript=self.transcript + (entry,), running=None), None
        return self, None

    def _submit(self) -> tuple[ShellPane, AnyCommand]:
        if self.running is not None:
            return self, None
        line = self.input
        if not line.strip():
            return replace(self, input=""), None

        prompt = TranscriptEntry(EntryKind.PROMPT, line, directory=_basename(self.current_directory))
        parts = line.split()
        cleared = replace(self, input="")

        if parts[0] == "cd":
            try:
                new_dir = resolve_cd(self.current_directory, parts[1:])
            except UserInputError as e:
                entry = TranscriptEntry(EntryKind.ERROR, str(e))
                return replace(cleared, transcript=self.transcript + (prompt, entry)), None
            return replace(cleared, transcript=self.transcript + (prompt,), current_directory=new_dir), None

        if parts[0] == "clear" and len(parts) == 1:
            return replace(cleared, transcript=()), None

        command = Command(
            work=partial(run_line, self.run_process, line, self.current_directory, self.timeout),
            name="shell",
        )
        return replace(cleared, transcript=self.transcript + (prompt,), running=line), command

    # ─── View ──────────────────────────────────────────────────────────

    def _entry_lines(self, entry: TranscriptEntry) -> list[Text]:
        if entry.kind is EntryKind.PROMPT:
            line = Text()
            line.append(entry.directory, style=styles.PATH)
            line.append(" $ ", style=styles.PROMPT)
            line.append(entry.text)
            return [line]
        style = styles.ERROR if entry.kind is EntryKind.ERROR else ""
        return [Text(part, style=style) for part in entry.text.rstrip("\n").split("\n")]

    def view(self) -> Text:
        lines: list[Text] = []
        for entry in self.transcript:
            lines.extend(self._entry_lines(entry))

        prompt = Text()
        prompt.append(_basename(self.current_directory), style=styles.PATH)
        prompt.append(" $ ", style=styles.PROMPT)
        if self.running is not None:
            prompt.append(f"running: {self.running}…", style=styles.DIM)
        else:
            prompt.append(self.input)
            prompt.append("█", style=styles.DIM)

        return join_lines(tail(lines + [prompt], self.height))
