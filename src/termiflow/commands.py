"""Commands and the Command Executor.

A Command is a value describing deferred work. Creating one starts nothing;
handing it to Executor.run() does. Each unit of work runs on its own daemon
thread and delivers at most one Message to the shared inbox queue, which the
runtime loop drains on its own thread.

// [LAW:single-enforcer] execute() is the only place Command work is invoked,
//   and the only place a crashing Command is turned into a Message.
// [LAW:dataflow-not-control-flow] "No work" is None; fan-out is Batch; exit is QUIT.
"""

from __future__ import annotations

import logging
import queue
import threading
import weakref
from collections.abc import Callable, Iterator
from dataclasses import dataclass, replace

from termiflow.errors import kind_of
from termiflow.messages import CommandCrashed, Message

logger = logging.getLogger(__name__)


MessageMapper = Callable[[Message], Message]


@dataclass(frozen=True, eq=False)
class Command:
    """One deferred unit of work producing one Message (or None)."""

    work: Callable[[], Message | None]
    name: str = "command"
    mappers: tuple[MessageMapper, ...] = ()

    def map(self, fn: MessageMapper) -> Command:
        """Return a new Command whose result (success or crash) is passed through fn."""
        return replace(self, mappers=self.mappers + (fn,))


@dataclass(frozen=True, eq=False)
class Batch:
    """Several Commands that run independently; results arrive in completion order."""

    commands: tuple[Command, ...]

    def map(self, fn: MessageMapper) -> Batch:
        return Batch(tuple(cmd.map(fn) for cmd in self.commands))


class Quit:
    """Sentinel Command that ends the runtime loop. Never executed."""

    _instance: Quit | None = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def map(self, fn: MessageMapper) -> Quit:
        return self

    def __repr__(self) -> str:
        return "QUIT"


QUIT = Quit()

AnyCommand = Command | Batch | Quit | None


def batch(*commands: AnyCommand) -> AnyCommand:
    """Combine commands into one logical Command.

    None entries are dropped and nested batches are flattened. QUIT wins over
    everything else. Returns None when nothing is left.
    """
    flat: list[Command] = []
    for cmd in commands:
        if cmd is None:
            continue
        if isinstance(cmd, Quit):
            return QUIT
        if isinstance(cmd, Batch):
            flat.extend(cmd.commands)
        else:
            flat.append(cmd)
    if not flat:
        return None
    if len(flat) == 1:
        return flat[0]
    return Batch(tuple(flat))


def iter_commands(command: AnyCommand) -> Iterator[Command]:
    """Yield the runnable leaves of a command (nothing for None/QUIT)."""
    if command is None or isinstance(command, Quit):
        return
    if isinstance(command, Batch):
        yield from command.commands
        return
    yield command


def execute(command: Command) -> Message | None:
    """Run one Command synchronously on the calling thread.

    Exceptions never escape: they become a CommandCrashed message, which is
    still routed through the Command's mappers so it reaches its origin.
    """
    try:
        message = command.work()
    except Exception as e:
        logger.exception("Command %s crashed", command.name)
        message = CommandCrashed(command=command.name, error=f"{type(e).__name__}: {e}", kind=kind_of(e))
    if message is None:
        return None
    for fn in command.mappers:
        message = fn(message)
    return message


class Executor:
    """Starts Commands on worker threads and funnels their Messages into one queue."""

    def __init__(self, inbox: queue.Queue):
        self._inbox = inbox
        self._lock = threading.Lock()
        # Identity-keyed: a Command object is started at most once.
        self._started: weakref.WeakSet[Command] = weakref.WeakSet()

    @property
    def inbox(self) -> queue.Queue:
        return self._inbox

    def run(self, command: AnyCommand) -> None:
        """Start every leaf of `command` without blocking the caller."""
        for leaf in iter_commands(command):
            with self._lock:
                if leaf in self._started:
                    logger.warning("Command %s already started; ignoring resubmission", leaf.name)
                    continue
                self._started.add(leaf)
            thread = threading.Thread(
                target=self._work,
                args=(leaf,),
                name=f"cmd-{leaf.name}",
                daemon=True,
            )
            thread.start()

    def _work(self, command: Command) -> None:
        message = execute(command)
        if message is not None:
            self._inbox.put(message)
