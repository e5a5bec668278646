"""Watches a directory of "<session_id>.flag" sentinel files."""

from __future__ import annotations

import os
from pathlib import Path

_FLAG_SUFFIX = ".flag"


class WaitingFlagWatcher:
    """Reports sessions whose hook signalled they are waiting for input.

    A session's flag file is named after its conversation JSONL stem.
    """

    def __init__(self, flag_dir: str | os.PathLike) -> None:
        self._dir = Path(flag_dir)
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
        except OSError:
            pass

    @property
    def dir(self) -> Path:
        """The directory being watched."""
        return self._dir

    def poll_pending(self) -> set[str]:
        """Return the session ids whose flag files are present."""
        pending: set[str] = set()
        try:
            with os.scandir(self._dir) as entries:
                for entry in entries:
                    path = Path(entry.path)
                    if path.suffix == _FLAG_SUFFIX:
                        pending.add(path.stem)
        except OSError:
            pass
        return pending

    def clear(self, session_id: str) -> None:
        """Remove the flag for ``session_id`` if present."""
        try:
            (self._dir / f"{session_id}{_FLAG_SUFFIX}").unlink(missing_ok=True)
        except OSError:
            pass