"""Tunable limits and defaults shared across the hub."""

from typing import Final

# UI
SIDEBAR_WIDTH_PX: Final = 280
WINDOW_INIT_W: Final = 1400
WINDOW_INIT_H: Final = 900
BUTTON_HEIGHT_PX: Final = 30
BLINK_PERIOD_MS: Final = 500
LABEL_NAME_MAX: Final = 32

# Activity detection
JSONL_TAIL_BYTES: Final = 8192

# Timing
TICK_EVERY_N_FRAMES: Final = 30
WT_WINDOW_POLL_ATTEMPTS: Final = 300
WT_POLL_SLEEP_MS: Final = 25
SESSION_FILE_POLL_ATTEMPTS: Final = 200
WT_SPAWN_WAIT_MS: Final = 5000

# CLI defaults. The terminal launches commands without PATHEXT lookup,
# so script shims must be named with their extension.
COPILOT_COMMAND: Final = "copilot"
GEMINI_COMMAND: Final = "gemini.cmd"