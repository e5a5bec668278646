# agentshub

`agentshub` is a library that keeps track of several command-line AI agent
sessions (Claude, Copilot and Gemini), each started in its own Windows
Terminal window. It launches the agents, follows Claude's per-process session
files, tails Claude's conversation logs, and works out which agents have
finished their turn and are waiting for input.

## Modules

- `agentshub.kinds`: `AgentKind` (`CLAUDE`, `COPILOT`, `GEMINI`),
  `to_string(kind)` (returns `"unknown"` for anything that is not a kind), and
  the frozen dataclass `SpawnConfig(kind, cwd)`. A `cwd` of `None` means that
  the terminal inherits the launcher's directory.
- `agentshub.constants`: timing, polling and size limits, and the Copilot and
  Gemini command names.
- `agentshub.drivers`: `get_driver(kind)` returns the shared `AgentDriver` for
  a kind (`ClaudeDriver`, `CopilotDriver` or `GeminiDriver`). Each driver has
  `kind`, `name_prefix`, `uses_claude_telemetry` and `build_command()`. The
  Claude command is `claude.exe` under `~/.local/bin`.
- `agentshub.session_discovery`: `home_dir()` (`%USERPROFILE%` when set,
  otherwise the user's home), `claude_exe_path()`, `encode_cwd(cwd)` (turns
  `:`, `\` and `/` into `-`), `project_dir_for(cwd)`, `snapshot_pid_jsons()`,
  `find_new_pid_json_since(before, claimed)`, `find_current_claude(pid)`
  (searches the pid and its descendants for the live process with the newest
  `startedAt`), `read_pid_json(pid)` returning a `PidJsonEntry` or `None`, and
  `snapshot_jsonls(project_dir)`.
- `agentshub.jsonl_parsing`: `find_json_string_end(s, start)`, which returns
  -1 when the string is unterminated, and `unescape_json(raw)`.
- `agentshub.activity_probe`: `JsonlActivityProbe(path, owner_name, log)`. Its
  `poll(now)` re-reads the file only when the file size has changed. It reads
  the last 8 KiB for `last_entry_type`, `last_stop_reason`,
  `last_assistant_text`, `input_tokens` (the latest value) and `output_tokens`
  (summed across turns). It reads the first 4 KiB for `conversation_title`,
  which comes from `customTitle`, then `agentName`, then the first plain user
  prompt.
- `agentshub.flag_watcher`: `WaitingFlagWatcher(dir)`. `poll_pending()` returns
  the session ids that have a `<session_id>.flag` file, and `clear(session_id)`
  removes one of those files.
- `agentshub.logger`: `Logger(path)` truncates the file when it opens it. It
  writes printf-style messages with `logf` and flushes after each one. It works
  as a context manager.
- `agentshub.terminal`: `build_command_line(title, command_tail, cwd)` and
  `spawn(title, command_tail, cwd)`, which runs `wt.exe` and waits for a new
  terminal host process (`OpenConsole.exe` or `conhost.exe`). It returns a
  `SpawnResult`, which is falsy when nothing appeared in time.
- `agentshub.agent`: `Agent` and `TerminalWindow`. `Agent.close()` kills the
  inner CLI process when its pid is known, then detaches and closes the window.
  Calling it more than once is safe.
- `agentshub.manager`: `AgentManager(container, log, spawner)`.

## AgentManager

- `spawn(cfg)` launches a terminal in a background thread. For Claude it also
  claims the new session file and snapshots the existing conversation files.
- `poll_spawns()` is cheap and is meant to run every frame. It docks finished
  windows and applies finished session lookups. `pending_spawn_count` gives the
  number of spawns still in flight.
- `tick()` does the following, in order:
  1. Reaps agents whose host process has died.
  2. Matches new conversation files to Claude agents, oldest agent first.
  3. Follows `/resume` to the live process and picks up renames and session
     switches.
  4. Polls every probe.
  5. Recomputes `waiting`.

  An agent that is not active counts as waiting when its last assistant entry
  ended with `end_turn`, or when it has a flag file.
- `switch_to(index)` makes an agent the active one and clears its waiting state
  and flag file.
- `kill(index)` closes an agent and removes it. Out-of-range indices are
  ignored.
- `active_index` is -1 when there are no agents. `agents` returns a tuple of
  the agents, and `len(manager)` returns how many there are.
- `reposition_active()` sizes the active agent to the container, minus the
  sidebar width. The container must provide `client_size()`, and a container
  of `None` is allowed.
- `spawner` replaces the terminal launcher. It is called as
  `spawner(title, command, cwd)` and must return a `SpawnResult`.

```python
from pathlib import Path

from agentshub.kinds import AgentKind, SpawnConfig
from agentshub.logger import Logger
from agentshub.manager import AgentManager

with Logger("debug.log") as log:
    manager = AgentManager(None, log, None)
    manager.spawn(SpawnConfig(kind=AgentKind.CLAUDE, cwd=Path("C:/work/project")))

    # In your main loop:
    manager.poll_spawns()   # every frame
    manager.tick()          # every few frames

    for agent in manager.agents:
        print(agent.name, agent.waiting)
```

```python
from agentshub.jsonl_parsing import find_json_string_end, unescape_json

line = '"say \\"hi\\""'
end = find_json_string_end(line, 1)
print(unescape_json(line[1:end]))   # say "hi"
```

## What it does not do

- It has no user interface and no command: there is no window, sidebar, folder
  picker or main loop. You drive `AgentManager` from your own code.
- `TerminalWindow` only records visibility, placement, parent, focus and
  closed state. It does not move, embed or close the real terminal window on
  screen.
- For Copilot and Gemini agents, closing does not stop the inner CLI, because
  its pid is not tracked.

## Requirements

Python 3.10 or later, and `psutil`. Launching terminals needs Windows Terminal
(`wt.exe`). Parsing, session discovery, probes and flag watching work on any
platform.