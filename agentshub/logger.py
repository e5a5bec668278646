"""A minimal append-and-flush debug log."""

from __future__ import annotations

import os


class Logger:
    """Writes printf-style messages to a file, flushing after each one.

    If the file cannot be opened, logging silently does nothing.
    """

    def __init__(self, path: str | os.PathLike) -> None:
        try:
            self._fp = open(path, "w", encoding="utf-8")
        except OSError:
            self._fp = None

    def logf(self, fmt: str, *args) -> None:
        """Format ``fmt % args`` and write it, if the log is open."""
        if self._fp is None:
            return
        self._fp.write(fmt % args if args else fmt)
        self._fp.flush()

    def close(self) -> None:
        """Close the underlying file; later messages are dropped."""
        if self._fp is not None:
            self._fp.close()
            self._fp = None

    def __enter__(self) -> Logger:
        return self

    def __exit__(self, *args) -> None:
        self.close()