"""Owns every agent and the operations that span them."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from concurrent.futures import Future
from dataclasses import dataclass, field
from pathlib import Path

from . import session_discovery
from .agent import Agent
from .constants import SESSION_FILE_POLL_ATTEMPTS, SIDEBAR_WIDTH_PX, WT_POLL_SLEEP_MS
from .drivers import get_driver
from .flag_watcher import WaitingFlagWatcher
from .kinds import AgentKind, SpawnConfig, to_string
from .logger import Logger
from .terminal import SpawnResult
from .terminal import spawn as spawn_terminal

Spawner = Callable[[str, str, "Path | None"], SpawnResult]


@dataclass
class _WindowStage:
    unique_name: str
    window: object = None
    process: object = None


@dataclass
class _ProbeStage:
    claude_pid: int = 0
    cwd: str = ""
    session_id: str = ""
    jsonl_snapshot: set[str] = field(default_factory=set)


@dataclass
class _PendingSpawn:
    kind: AgentKind
    cwd_hint: str
    spawn_time: float
    window_future: Future
    probe_future: Future
    agent_index: int = -1


class AgentManager:
    """Spawns, kills, switches, ticks and positions the hub's agents.

    ``container`` is the object agent windows are docked into; when not None
    it must provide ``client_size()`` returning ``(width, height)``.
    ``spawner`` launches a terminal as ``spawner(title, command, cwd)`` and
    defaults to opening a Windows Terminal window.
    """

    def __init__(self, container, log: Logger, spawner: Spawner | None = None) -> None:
        self._container = container
        self._log = log
        self._spawner: Spawner = spawner or spawn_terminal
        self._flag_watcher = WaitingFlagWatcher(
            session_discovery.home_dir() / ".claude" / "hub-waiting"
        )
        self._agents: list[Agent] = []
        self._pending: list[_PendingSpawn] = []
        self._claim_lock = threading.Lock()
        self._claimed_pids: set[int] = set()
        self._active = -1
        self._next_id = 0

    @property
    def active_index(self) -> int:
        """Index of the visible agent, or -1 when there is none."""
        return self._active

    @property
    def agents(self) -> tuple[Agent, ...]:
        """The docked agents, in sidebar order."""
        return tuple(self._agents)

    @property
    def pending_spawn_count(self) -> int:
        """Number of spawns still waiting for their window or probe stage."""
        return len(self._pending)

    def __len__(self) -> int:
        return len(self._agents)

    # ─── spawning ───

    def spawn(self, cfg: SpawnConfig) -> None:
        """Start launching a new agent in the background."""
        driver = get_driver(cfg.kind)
        name = f"{driver.name_prefix}_{int(time.monotonic() * 1000)}_{self._next_id}"
        self._next_id += 1

        uses_telemetry = driver.uses_claude_telemetry
        pid_snapshot = session_discovery.snapshot_pid_jsons() if uses_telemetry else set()
        spawn_time = time.monotonic()
        command = driver.build_command()
        cwd = cfg.cwd
        cwd_hint = str(cwd) if cwd else ""

        self._log.logf(
            "Agent %s: spawn queued (kind=%s cwd=%s)\n",
            name,
            to_string(cfg.kind),
            cwd_hint or "<inherit>",
        )

        window_future: Future = Future()
        probe_future: Future = Future()
        self._pending.append(
            _PendingSpawn(
                kind=cfg.kind,
                cwd_hint=cwd_hint,
                spawn_time=spawn_time,
                window_future=window_future,
                probe_future=probe_future,
            )
        )

        worker = threading.Thread(
            target=self._spawn_worker,
            args=(name, command, cwd, pid_snapshot, uses_telemetry, window_future, probe_future),
            daemon=True,
        )
        worker.start()

    def _spawn_worker(
        self,
        name: str,
        command: str,
        cwd,
        pid_snapshot: set[int],
        uses_telemetry: bool,
        window_future: Future,
        probe_future: Future,
    ) -> None:
        try:
            result = self._spawner(name, command, cwd)
        except Exception as exc:  # a failed launch is reported as a failed spawn
            self._log.logf("Agent %s: spawner raised %s\n", name, exc)
            result = SpawnResult()
        window_future.set_result(
            _WindowStage(unique_name=name, window=result.window, process=result.process)
        )

        if result.window is None or not uses_telemetry:
            probe_future.set_result(_ProbeStage())
            return

        probe = _ProbeStage()
        with self._claim_lock:
            for _ in range(SESSION_FILE_POLL_ATTEMPTS):
                info = session_discovery.find_new_pid_json_since(pid_snapshot, self._claimed_pids)
                if info is not None:
                    probe.claude_pid = info.pid
                    probe.cwd = info.cwd
                    probe.session_id = info.session_id
                    self._claimed_pids.add(info.pid)
                    break
                time.sleep(WT_POLL_SLEEP_MS / 1000)
        if probe.cwd:
            probe.jsonl_snapshot = session_discovery.snapshot_jsonls(
                session_discovery.project_dir_for(probe.cwd)
            )
        probe_future.set_result(probe)

    def poll_spawns(self) -> None:
        """Dock finished windows and apply finished probe stages. Cheap."""
        remaining: list[_PendingSpawn] = []
        for pending in self._pending:
            if pending.agent_index < 0 and pending.window_future.done():
                pending.agent_index = self._commit_window_stage(
                    pending.window_future.result(),
                    pending.kind,
                    pending.cwd_hint,
                    pending.spawn_time,
                )
                if pending.agent_index < 0:
                    continue
            if pending.agent_index >= 0 and pending.probe_future.done():
                self._commit_probe_stage(pending.agent_index, pending.probe_future.result())
                continue
            remaining.append(pending)
        self._pending = remaining

    def _commit_window_stage(
        self, stage: _WindowStage, kind: AgentKind, cwd_hint: str, spawn_time: float
    ) -> int:
        if stage.window is None:
            self._log.logf("Agent %s: WT spawn failed\n", stage.unique_name)
            return -1

        # Claude's cwd comes from its session file in the probe stage; setting
        # it early would let jsonl discovery claim a stale conversation.
        initial_cwd = "" if kind is AgentKind.CLAUDE else cwd_hint
        agent = Agent(
            kind,
            stage.unique_name,
            stage.window,
            stage.process,
            0,
            initial_cwd,
            set(),
            spawn_time,
        )
        agent.reparent_as_child(self._container)

        if 0 <= self._active < len(self._agents):
            self._agents[self._active].hide()

        self._agents.append(agent)
        idx = len(self._agents) - 1
        self._active = idx
        agent.show()
        self.reposition_active()
        agent.focus()
        return idx

    def _commit_probe_stage(self, agent_index: int, stage: _ProbeStage) -> None:
        if not 0 <= agent_index < len(self._agents):
            return
        agent = self._agents[agent_index]

        if stage.claude_pid == 0:
            self._log.logf("Agent %s: pid.json NOT FOUND after spawn\n", agent.name)
            return
        self._log.logf(
            "Agent %s: claude pid=%d cwd=%s sid=%s\n",
            agent.name,
            stage.claude_pid,
            stage.cwd,
            stage.session_id,
        )

        # Keep sibling agents' conversations out of this agent's discovery.
        snapshot = set(stage.jsonl_snapshot)
        snapshot.update(a.jsonl_path.name for a in self._agents if a.jsonl_path)

        agent.claude_pid = stage.claude_pid
        agent.cwd = stage.cwd
        agent.jsonl_snapshot = snapshot

        if stage.session_id:
            jsonl = session_discovery.project_dir_for(stage.cwd) / f"{stage.session_id}.jsonl"
            agent.attach_jsonl(jsonl, self._log)

    # ─── switching and removal ───

    def kill(self, index: int) -> None:
        """Close and remove the agent at ``index``; out-of-range is ignored."""
        if not 0 <= index < len(self._agents):
            return
        self._agents.pop(index).close()

        if not self._agents:
            self._active = -1
            return

        self._active = index % len(self._agents)
        active = self._agents[self._active]
        active.show()
        self.reposition_active()
        active.focus()

    def switch_to(self, index: int) -> None:
        """Make the agent at ``index`` the visible one."""
        if not 0 <= index < len(self._agents) or index == self._active:
            return
        if self._active >= 0:
            self._agents[self._active].hide()
        self._active = index
        active = self._agents[index]
        active.show()
        self.reposition_active()
        active.focus()
        active.waiting = False
        if active.jsonl_path:
            self._flag_watcher.clear(active.jsonl_path.stem)

    def reposition_active(self) -> None:
        """Fit the visible agent to the container, left of the sidebar."""
        if self._active < 0 or self._container is None:
            return
        width, height = self._container.client_size()
        self._agents[self._active].move_to(0, 0, width - SIDEBAR_WIDTH_PX, height)

    # ─── periodic work ───

    def tick(self) -> None:
        """Reap dead agents, track sessions, poll probes and update waiting state."""
        self._reap_dead()
        self._discover_jsonls()
        self._sync_pid_state()

        now = time.monotonic()
        for agent in self._agents:
            if agent.probe is not None:
                agent.probe.poll(now)

        self._update_waiting()

    def _reap_dead(self) -> None:
        for i in reversed(range(len(self._agents))):
            if self._agents[i].is_alive():
                continue
            self._agents.pop(i).close()
            if self._active == i:
                self._active = 0 if self._agents else -1
            elif self._active > i:
                self._active -= 1
            if self._active >= 0:
                self._agents[self._active].show()
                self.reposition_active()

    def _sync_pid_state(self) -> None:
        # /resume starts the new claude inside the old one, so the live
        # process is the claimed pid or one of its descendants.
        for agent in self._agents:
            if agent.claude_pid == 0:
                continue
            live_pid = session_discovery.find_current_claude(agent.claude_pid)
            if not live_pid:
                continue

            if live_pid != agent.claude_pid:
                self._log.logf(
                    "Agent %s: claude pid %d -> %d\n", agent.name, agent.claude_pid, live_pid
                )
                agent.claude_pid = live_pid

            info = session_discovery.read_pid_json(live_pid)
            if info is None:
                continue

            if agent.title != info.name:
                agent.title = info.name

            current_sid = agent.jsonl_path.stem if agent.jsonl_path else ""
            if not info.session_id or info.session_id == current_sid:
                continue

            new_jsonl = session_discovery.project_dir_for(agent.cwd) / f"{info.session_id}.jsonl"
            if not new_jsonl.exists():
                continue

            self._log.logf(
                "Agent %s: session switched %s -> %s\n", agent.name, current_sid, info.session_id
            )
            agent.attach_jsonl(new_jsonl, self._log)

    def _discover_jsonls(self) -> None:
        # FIFO: the oldest unclaimed Claude agent gets the oldest unclaimed JSONL.
        unclaimed = [
            a
            for a in self._agents
            if a.kind is AgentKind.CLAUDE and not a.has_probe() and a.cwd
        ]
        if not unclaimed:
            return
        target = min(unclaimed, key=lambda a: a.spawn_time)

        proj_dir = session_discovery.project_dir_for(target.cwd)
        if not proj_dir.exists():
            return

        claimed = {a.jsonl_path.name for a in self._agents if a.jsonl_path}
        candidates: list[tuple[int, Path]] = []
        for path in proj_dir.iterdir():
            if path.suffix != ".jsonl":
                continue
            if path.name in target.jsonl_snapshot or path.name in claimed:
                continue
            try:
                mtime = path.stat().st_mtime_ns
            except OSError:
                mtime = 0
            candidates.append((mtime, path))
        if not candidates:
            return

        candidates.sort(key=lambda c: c[0])
        chosen = candidates[0][1]
        target.attach_jsonl(chosen, self._log)
        self._log.logf(
            "Agent %s: discovered jsonl=%s (FIFO match, %d candidates)\n",
            target.name,
            str(chosen),
            len(candidates),
        )

    def _update_waiting(self) -> None:
        pending = self._flag_watcher.poll_pending()

        for i, agent in enumerate(self._agents):
            prev_waiting = agent.waiting

            if i == self._active:
                agent.waiting = False
                if agent.jsonl_path:
                    self._flag_watcher.clear(agent.jsonl_path.stem)
                continue
            if agent.probe is None:
                agent.waiting = False
                continue

            sid = agent.jsonl_path.stem if agent.jsonl_path else ""
            hook_flagged = sid in pending
            probe = agent.probe
            turn_complete = (
                probe.last_entry_type == "assistant" and probe.last_stop_reason == "end_turn"
            )
            new_waiting = hook_flagged or turn_complete
            agent.waiting = new_waiting

            if prev_waiting != new_waiting:
                self._log.logf(
                    "Agent %s: waiting %d -> %d (last=%s stop=%s hook=%d)\n",
                    agent.name,
                    int(prev_waiting),
                    int(new_waiting),
                    probe.last_entry_type,
                    probe.last_stop_reason,
                    int(hook_flagged),
                )