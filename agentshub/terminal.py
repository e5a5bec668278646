"""Launching a new Windows Terminal window for an agent."""

from __future__ import annotations

import os
import shlex
import subprocess
import time
from dataclasses import dataclass

import psutil

from .agent import TerminalWindow
from .constants import WT_POLL_SLEEP_MS, WT_WINDOW_POLL_ATTEMPTS

# Processes that host a terminal tab for as long as the tab is open.
_HOST_NAMES = frozenset({"openconsole.exe", "conhost.exe"})


@dataclass
class SpawnResult:
    """Outcome of a terminal spawn; falsy when no terminal was found."""

    window: TerminalWindow | None = None
    process: psutil.Process | None = None
    pid: int = 0

    def __bool__(self) -> bool:
        return self.window is not None


def build_command_line(title: str, command_tail: str, cwd=None) -> str:
    """The wt.exe command line opening a new window titled ``title``.

    ``cwd`` of None or empty lets the terminal inherit the launcher's directory.
    """
    cmd = f'wt.exe -w -1 --title "{title}"'
    cwd_text = "" if cwd is None else os.fspath(cwd)
    if cwd_text:
        cmd += f' -d "{cwd_text}"'
    return f"{cmd} -- {command_tail}"


def _host_pids() -> set[int]:
    pids: set[int] = set()
    for proc in psutil.process_iter(["pid", "name"]):
        name = (proc.info.get("name") or "").lower()
        if name in _HOST_NAMES:
            pids.add(proc.info["pid"])
    return pids


def _argv(command_line: str):
    return command_line if os.name == "nt" else shlex.split(command_line)


def spawn(title: str, command_tail: str, cwd=None) -> SpawnResult:
    """Run wt.exe and wait for the terminal host process of the new window.

    Returns an empty result if the launcher could not start or no new
    terminal appeared in time.
    """
    before = _host_pids()
    try:
        subprocess.Popen(_argv(build_command_line(title, command_tail, cwd)))
    except OSError:
        return SpawnResult()

    # The launcher is a short-lived shim; the tab lives in a separate host.
    for _ in range(WT_WINDOW_POLL_ATTEMPTS):
        for pid in sorted(_host_pids() - before):
            try:
                process = psutil.Process(pid)
            except psutil.Error:
                continue
            return SpawnResult(window=TerminalWindow(title), process=process, pid=pid)
        time.sleep(WT_POLL_SLEEP_MS / 1000)
    return SpawnResult()