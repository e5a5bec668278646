"""Locating Claude's per-process session files and conversation JSONLs."""

from __future__ import annotations

import os
import re
from collections import defaultdict, deque
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

import psutil

_CLAUDE_SUBDIR = ".claude"
_SESSIONS_SUBDIR = "sessions"
_PROJECTS_SUBDIR = "projects"
_KEY_SESSION_ID = "sessionId"
_KEY_PID = "pid"
_KEY_NAME = "name"
_KEY_STARTED_AT = '"startedAt":'
_KEY_CWD_HEAD = '"cwd":"'
_MAX_DESCENDANT_DEPTH = 16

_LEADING_UINT = re.compile(r"\s*\+?(\d+)")
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_CWD_TRANSLATION = str.maketrans({":": "-", "\\": "-", "/": "-"})


@dataclass
class PidJsonEntry:
    """The fields of a ``<pid>.json`` session file the hub cares about."""

    session_id: str = ""
    cwd: str = ""
    name: str = ""
    pid: int = 0


def home_dir() -> Path:
    """The user's home directory, taken from %USERPROFILE% when set."""
    profile = os.environ.get("USERPROFILE")
    return Path(profile) if profile else Path.home()


def claude_exe_path() -> Path:
    """Default location of the claude executable."""
    return home_dir() / ".local" / "bin" / "claude.exe"


def encode_cwd(cwd: str) -> str:
    """Turn a working directory into Claude's project directory slug."""
    return cwd.translate(_CWD_TRANSLATION)


def project_dir_for(cwd: str) -> Path:
    """The project directory Claude uses for conversations started in ``cwd``."""
    return home_dir() / _CLAUDE_SUBDIR / _PROJECTS_SUBDIR / encode_cwd(cwd)


def _sessions_dir() -> Path:
    return home_dir() / _CLAUDE_SUBDIR / _SESSIONS_SUBDIR


def _iter_dir(path: Path) -> Iterator[Path]:
    try:
        with os.scandir(path) as entries:
            for entry in entries:
                yield Path(entry.path)
    except OSError:
        return


def _parse_uint(text: str) -> int | None:
    match = _LEADING_UINT.match(text)
    return int(match.group(1)) if match else None


def _extract_simple_value(content: str, key: str) -> str:
    pos = content.find(f'"{key}":')
    if pos < 0:
        return ""
    start = pos + len(key) + 3
    while start < len(content) and content[start] in ' "':
        start += 1
    ends = [i for i in (content.find(c, start) for c in ',"}') if i >= 0]
    return content[start:min(ends)] if ends else content[start:]


def _extract_cwd(content: str) -> str:
    pos = content.find(_KEY_CWD_HEAD)
    if pos < 0:
        return ""
    start = pos + len(_KEY_CWD_HEAD)
    end = content.find('"', start)
    raw = content[start:end] if end >= 0 else content[start:]
    return raw.replace("\\\\", "\\")


def _parse_started_at(content: str) -> int:
    pos = content.find(_KEY_STARTED_AT)
    if pos < 0:
        return 0
    match = _LEADING_INT.match(content, pos + len(_KEY_STARTED_AT))
    return int(match.group(1)) if match else 0


def _read_file(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return ""


def _is_process_alive(pid: int) -> bool:
    try:
        proc = psutil.Process(pid)
        return proc.is_running() and proc.status() != psutil.STATUS_ZOMBIE
    except psutil.Error:
        return False


def _content_to_entry(content: str) -> PidJsonEntry:
    return PidJsonEntry(
        session_id=_extract_simple_value(content, _KEY_SESSION_ID),
        cwd=_extract_cwd(content),
        name=_extract_simple_value(content, _KEY_NAME),
        pid=_parse_uint(_extract_simple_value(content, _KEY_PID)) or 0,
    )


def snapshot_pid_jsons() -> set[int]:
    """The pids of all ``<pid>.json`` files currently in the sessions dir."""
    pids: set[int] = set()
    for path in _iter_dir(_sessions_dir()):
        if path.suffix != ".json":
            continue
        pid = _parse_uint(path.stem)
        if pid is not None:
            pids.add(pid)
    return pids


def find_new_pid_json_since(before: set[int], claimed: set[int]) -> PidJsonEntry | None:
    """Find the newest live session file that is neither in ``before`` nor claimed."""
    best_started = 0
    best_content = ""
    for path in _iter_dir(_sessions_dir()):
        if path.suffix != ".json":
            continue
        pid = _parse_uint(path.stem)
        if pid is None or pid in before or pid in claimed:
            continue
        if not _is_process_alive(pid):
            continue
        content = _read_file(path)
        if not content:
            continue
        started = _parse_started_at(content)
        if started <= best_started:
            continue
        best_started = started
        best_content = content
    if not best_content:
        return None
    entry = _content_to_entry(best_content)
    return entry if entry.session_id else None


def _children_by_parent() -> dict[int, list[int]]:
    children: dict[int, list[int]] = defaultdict(list)
    for proc in psutil.process_iter(["pid", "ppid"]):
        info = proc.info
        if info.get("ppid") is not None:
            children[info["ppid"]].append(info["pid"])
    return children


def find_current_claude(initial_pid: int) -> int:
    """Return the live claude pid at or below ``initial_pid``, or 0.

    Walks ``initial_pid`` and its descendants and picks the live one with a
    session file and the newest ``startedAt``, which follows /resume chains.
    """
    if initial_pid == 0:
        return 0
    children = _children_by_parent()

    candidates: list[int] = []
    visited: set[int] = set()
    queue = deque([(initial_pid, 0)])
    while queue:
        pid, depth = queue.popleft()
        if pid in visited or depth > _MAX_DESCENDANT_DEPTH:
            continue
        visited.add(pid)
        candidates.append(pid)
        queue.extend((child, depth + 1) for child in children.get(pid, ()))

    sessions = _sessions_dir()
    best_started = 0
    best_pid = 0
    for pid in candidates:
        path = sessions / f"{pid}.json"
        if not path.exists() or not _is_process_alive(pid):
            continue
        content = _read_file(path)
        if not content:
            continue
        started = _parse_started_at(content)
        if started <= best_started:
            continue
        best_started = started
        best_pid = pid
    return best_pid


def read_pid_json(pid: int) -> PidJsonEntry | None:
    """Read the session file for ``pid``; None if missing or without a session id."""
    path = _sessions_dir() / f"{pid}.json"
    if not path.exists():
        return None
    content = _read_file(path)
    entry = PidJsonEntry(
        session_id=_extract_simple_value(content, _KEY_SESSION_ID),
        cwd=_extract_cwd(content),
        name=_extract_simple_value(content, _KEY_NAME),
        pid=pid,
    )
    return entry if entry.session_id else None


def snapshot_jsonls(project_dir: str | os.PathLike) -> set[str]:
    """The names of all ``.jsonl`` files in ``project_dir``."""
    project_dir = Path(project_dir)
    if not project_dir.exists():
        return set()
    return {p.name for p in project_dir.iterdir() if p.suffix == ".jsonl"}