"""Detecting whether an agent is working, by tailing its conversation JSONL."""

from __future__ import annotations

import os
import re
from abc import ABC, abstractmethod
from pathlib import Path

from .constants import JSONL_TAIL_BYTES
from .jsonl_parsing import find_json_string_end, unescape_json
from .logger import Logger

_TYPE_MARKER = '"type":"'
_STOP_MARKER = '"stop_reason":"'
_USAGE_MARKER = '"usage":'
_TEXT_ITEM_MARKER = '"type":"text","text":"'
# Title sources in priority order: /rename title, /rename agent name,
# then the first plain-string user prompt.
_TITLE_MARKERS = (
    '"customTitle":"',
    '"agentName":"',
    '"role":"user","content":"',
)
_HEAD_BYTES = 4096
_PREVIEW_CHARS = 80
_MEANINGFUL_TYPES = frozenset({"user", "assistant"})
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _leading_int(text: str, pos: int) -> int:
    match = _LEADING_INT.match(text, pos)
    return int(match.group(1)) if match else 0


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace").replace("\r\n", "\n")


class ActivityProbe(ABC):
    """Reports what an agent's conversation is currently doing."""

    @abstractmethod
    def poll(self, now) -> None:
        """Refresh state from the underlying source."""

    @property
    @abstractmethod
    def last_entry_type(self) -> str:
        """Type of the latest user or assistant entry."""

    @property
    @abstractmethod
    def last_stop_reason(self) -> str:
        """Stop reason of the latest assistant entry, if it is the latest entry."""

    @property
    @abstractmethod
    def last_assistant_text(self) -> str:
        """The most recent assistant text content."""

    @property
    @abstractmethod
    def conversation_title(self) -> str:
        """A human-readable title for the conversation."""

    @property
    @abstractmethod
    def input_tokens(self) -> int:
        """Input tokens reported by the latest usage block."""

    @property
    @abstractmethod
    def output_tokens(self) -> int:
        """Output tokens accumulated across assistant turns."""


class JsonlActivityProbe(ActivityProbe):
    """Tails a Claude conversation JSONL and tracks its latest state."""

    def __init__(self, jsonl_path: str | os.PathLike, owner_name: str, log: Logger | None) -> None:
        self._path = Path(jsonl_path)
        self._owner_name = owner_name
        self._log = log
        self._last_size = 0
        self._last_entry_type = ""
        self._last_stop_reason = ""
        self._last_assistant_text = ""
        self._conversation_title = ""
        self._input_tokens = 0
        self._output_tokens = 0

    @property
    def path(self) -> Path:
        """The JSONL file being tailed."""
        return self._path

    @property
    def last_entry_type(self) -> str:
        return self._last_entry_type

    @property
    def last_stop_reason(self) -> str:
        return self._last_stop_reason

    @property
    def last_assistant_text(self) -> str:
        return self._last_assistant_text

    @property
    def conversation_title(self) -> str:
        return self._conversation_title

    @property
    def input_tokens(self) -> int:
        return self._input_tokens

    @property
    def output_tokens(self) -> int:
        return self._output_tokens

    def _logf(self, fmt: str, *args) -> None:
        if self._log is not None:
            self._log.logf(fmt, *args)

    def poll(self, now) -> None:
        """Re-read the file tail if the file has changed size since the last poll."""
        try:
            size = self._path.stat().st_size
        except OSError:
            return
        if size == 0 or size == self._last_size:
            return

        self._last_size = size
        self._logf("Agent %s: JSONL grew to %d bytes\n", self._owner_name, size)

        self._try_extract_title()

        try:
            with self._path.open("rb") as f:
                end = f.seek(0, os.SEEK_END)
                f.seek(max(0, end - JSONL_TAIL_BYTES))
                tail = _decode(f.read(JSONL_TAIL_BYTES))
        except OSError:
            return

        self._parse_tail(tail)
        self._logf(
            "Agent %s: last=%s stop_reason=%s\n",
            self._owner_name,
            self._last_entry_type,
            self._last_stop_reason,
        )

    def _parse_tail(self, tail: str) -> None:
        # The root "type" key follows the nested message body, so the last
        # occurrence on a line is the record type. System markers and other
        # record types are skipped; only user/assistant entries set state.
        self._last_stop_reason = ""

        for line in tail.split("\n"):
            if not line:
                continue
            tp = line.rfind(_TYPE_MARKER)
            if tp < 0:
                continue
            ts = tp + len(_TYPE_MARKER)
            te = line.find('"', ts)
            if te < 0:
                continue
            line_type = line[ts:te]
            if line_type not in _MEANINGFUL_TYPES:
                continue

            self._last_entry_type = line_type
            if line_type != "assistant":
                self._last_stop_reason = ""
                continue
            self._parse_assistant_line(line)

        if self._last_assistant_text:
            preview = self._last_assistant_text[:_PREVIEW_CHARS]
            self._logf(
                'Agent %s: assistant_text[0..%d]="%s"\n',
                self._owner_name,
                len(preview),
                preview,
            )

    def _parse_assistant_line(self, line: str) -> None:
        stop_bound = line.find(_STOP_MARKER)
        if stop_bound >= 0:
            s = stop_bound + len(_STOP_MARKER)
            e = line.find('"', s)
            self._last_stop_reason = line[s:e] if e >= 0 else ""
        else:
            self._last_stop_reason = ""

        content_end = len(line) if stop_bound < 0 else stop_bound
        text_tp = line.rfind(_TEXT_ITEM_MARKER, 0, content_end + len(_TEXT_ITEM_MARKER))
        if 0 <= text_tp < content_end:
            str_start = text_tp + len(_TEXT_ITEM_MARKER)
            str_end = find_json_string_end(line, str_start)
            if str_end >= 0:
                self._last_assistant_text = unescape_json(line[str_start:str_end])

        usage = line.find(_USAGE_MARKER)
        if usage < 0:
            return

        def usage_int(key: str) -> int:
            marker = f'"{key}":'
            kp = line.find(marker, usage)
            return _leading_int(line, kp + len(marker)) if kp >= 0 else 0

        in_tokens = usage_int("input_tokens")
        out_tokens = usage_int("output_tokens")
        if in_tokens:
            self._input_tokens = in_tokens
        if out_tokens:
            self._output_tokens += out_tokens

    def _try_extract_title(self) -> None:
        try:
            with self._path.open("rb") as f:
                head = _decode(f.read(_HEAD_BYTES))
        except OSError:
            return

        title = next(
            (t for t in (self._extract(head, marker) for marker in _TITLE_MARKERS) if t),
            "",
        )
        if title and title != self._conversation_title:
            self._conversation_title = title
            self._logf('Agent %s: title="%s"\n', self._owner_name, title)

    @staticmethod
    def _extract(head: str, marker: str) -> str:
        pos = head.find(marker)
        if pos < 0:
            return ""
        str_start = pos + len(marker)
        str_end = find_json_string_end(head, str_start)
        if str_end < 0:
            return ""
        return unescape_json(head[str_start:str_end])