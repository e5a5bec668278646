"""Per-kind strategy objects describing how each CLI agent is launched."""

from __future__ import annotations

from abc import ABC, abstractmethod

from . import constants
from .kinds import AgentKind
from .session_discovery import claude_exe_path


class AgentDriver(ABC):
    """What varies between agent kinds: command, name prefix, telemetry."""

    kind: AgentKind
    name_prefix: str
    uses_claude_telemetry: bool

    @abstractmethod
    def build_command(self) -> str:
        """The command line run inside the new terminal tab."""


class ClaudeDriver(AgentDriver):
    kind = AgentKind.CLAUDE
    name_prefix = "claude"
    uses_claude_telemetry = True

    def build_command(self) -> str:
        return str(claude_exe_path())


class CopilotDriver(AgentDriver):
    kind = AgentKind.COPILOT
    name_prefix = "copilot"
    uses_claude_telemetry = False

    def build_command(self) -> str:
        return constants.COPILOT_COMMAND


class GeminiDriver(AgentDriver):
    kind = AgentKind.GEMINI
    name_prefix = "gemini"
    uses_claude_telemetry = False

    def build_command(self) -> str:
        return constants.GEMINI_COMMAND


_DRIVERS: dict[AgentKind, AgentDriver] = {
    driver.kind: driver for driver in (ClaudeDriver(), CopilotDriver(), GeminiDriver())
}


def get_driver(kind) -> AgentDriver:
    """Return the shared driver instance for ``kind``."""
    return _DRIVERS[AgentKind(kind)]