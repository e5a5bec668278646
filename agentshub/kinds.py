"""Agent kinds and the parameters of a spawn request."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class AgentKind(Enum):
    """The CLI agents that can be launched."""

    CLAUDE = "claude"
    COPILOT = "copilot"
    GEMINI = "gemini"


def to_string(kind) -> str:
    """Return the lower-case label for a kind, or "unknown"."""
    try:
        return AgentKind(kind).value
    except ValueError:
        return "unknown"


@dataclass(frozen=True)
class SpawnConfig:
    """User-chosen parameters for a single New-Agent spawn request.

    ``cwd`` of None means the terminal inherits the launcher's directory.
    """

    kind: AgentKind = AgentKind.CLAUDE
    cwd: Path | None = None