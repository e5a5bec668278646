"""Spawn, track and monitor Claude, Copilot and Gemini CLI agent sessions."""

__version__ = "0.1.0"