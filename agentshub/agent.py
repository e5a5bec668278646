"""A single CLI agent session docked into the hub."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import psutil

from .activity_probe import ActivityProbe, JsonlActivityProbe
from .kinds import AgentKind
from .logger import Logger


@dataclass(eq=False)
class TerminalWindow:
    """The terminal window an agent runs in, and how it is placed in the hub.

    Operations on a closed window are ignored.
    """

    title: str
    visible: bool = False
    embedded: bool = False
    parent: object = None
    geometry: tuple[int, int, int, int] | None = None
    focused: bool = False
    closed: bool = False

    def is_valid(self) -> bool:
        return not self.closed

    def show(self) -> None:
        if not self.closed:
            self.visible = True

    def hide(self) -> None:
        if not self.closed:
            self.visible = False

    def move_to(self, x: int, y: int, w: int, h: int) -> None:
        if not self.closed:
            self.geometry = (x, y, w, h)

    def focus(self) -> None:
        if not self.closed:
            self.focused = True

    def embed(self, parent) -> None:
        """Strip the frame and make the window a child of ``parent``."""
        if not self.closed:
            self.embedded = True
            self.parent = parent

    def release(self) -> None:
        """Detach the window from its parent."""
        if not self.closed:
            self.embedded = False
            self.parent = None

    def close(self) -> None:
        self.visible = False
        self.focused = False
        self.closed = True


class Agent:
    """One agent session: its terminal window, host process and activity probe.

    Closing kills the inner CLI process (when known) and the window; use the
    agent as a context manager to close it on exit.
    """

    def __init__(
        self,
        kind: AgentKind,
        name: str,
        window: TerminalWindow | None,
        process: psutil.Process | None,
        claude_pid: int,
        cwd: str,
        jsonl_snapshot,
        spawn_time: float,
    ) -> None:
        self.kind = kind
        self.name = name
        self.window = window
        self.process = process
        self.claude_pid = claude_pid
        self.cwd = cwd
        self.jsonl_snapshot: set[str] = set(jsonl_snapshot)
        self.spawn_time = spawn_time
        self.jsonl_path: Path | None = None
        self.probe: ActivityProbe | None = None
        self.title = ""
        self.waiting = False

    def __enter__(self) -> Agent:
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def _live_window(self) -> TerminalWindow | None:
        if self.window is not None and self.window.is_valid():
            return self.window
        return None

    def reparent_as_child(self, parent) -> None:
        if self.window is not None:
            self.window.embed(parent)

    def show(self) -> None:
        if self.window is not None:
            self.window.show()

    def hide(self) -> None:
        if self.window is not None:
            self.window.hide()

    def move_to(self, x: int, y: int, w: int, h: int) -> None:
        if self.window is not None:
            self.window.move_to(x, y, w, h)

    def focus(self) -> None:
        if self.window is not None:
            self.window.focus()

    def is_alive(self) -> bool:
        """Whether the terminal host process is still running."""
        if self.process is None:
            return False
        try:
            return self.process.is_running() and self.process.status() != psutil.STATUS_ZOMBIE
        except psutil.Error:
            return False

    def close(self) -> None:
        """Kill the inner CLI and close the window. Safe to call repeatedly."""
        window = self._live_window()
        if window is not None:
            window.hide()

        if self.claude_pid:
            try:
                psutil.Process(self.claude_pid).kill()
            except psutil.Error:
                pass
            self.claude_pid = 0

        window = self._live_window()
        if window is not None:
            window.release()
            window.close()
            self.window = None

    def attach_jsonl(self, jsonl_path: str | os.PathLike, log: Logger | None) -> None:
        """Start tailing a discovered conversation JSONL."""
        self.jsonl_path = Path(jsonl_path)
        self.probe = JsonlActivityProbe(self.jsonl_path, self.name, log)

    def has_probe(self) -> bool:
        return self.probe is not None