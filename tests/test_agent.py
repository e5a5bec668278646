import subprocess
import sys
import time

import psutil
import pytest

from agentshub.agent import Agent, TerminalWindow
from agentshub.kinds import AgentKind


@pytest.fixture
def child():
    proc = subprocess.Popen([sys.executable, "-c", "import time; time.sleep(30)"])
    try:
        yield proc
    finally:
        if proc.poll() is None:
            proc.kill()
        proc.wait()


def make_agent_for_pid(pid, window=None, kind=AgentKind.CLAUDE):
    return Agent(kind, "test_agent", window, None, pid, "", set(), time.monotonic())


def test_close_terminates_claude_pid(child):
    assert child.poll() is None
    agent = make_agent_for_pid(child.pid)
    agent.close()
    assert child.wait(timeout=2) is not None
    assert agent.claude_pid == 0


def test_close_is_idempotent(child):
    window = TerminalWindow("t")
    agent = make_agent_for_pid(child.pid, window)
    agent.close()
    agent.close()
    agent.close()
    assert agent.claude_pid == 0
    assert agent.window is None
    assert window.closed


def test_close_safe_without_known_inner_pid():
    window = TerminalWindow("copilot_agent")
    window.show()
    agent = Agent(AgentKind.COPILOT, "copilot_agent", window, None, 0, "", set(), time.monotonic())
    agent.close()
    assert window.closed
    assert not window.visible
    assert agent.window is None


def test_context_exit_closes_implicitly(child):
    window = TerminalWindow("t")
    agent = make_agent_for_pid(child.pid, window)
    assert agent.claude_pid == child.pid
    with agent:
        pass
    assert agent.claude_pid == 0
    assert agent.window is None
    assert window.closed is True
    assert child.wait(timeout=2) is not None


def test_close_detaches_window():
    window = TerminalWindow("t")
    agent = make_agent_for_pid(0, window)
    agent.reparent_as_child("container")
    agent.close()
    assert window.parent is None
    assert not window.embedded


def test_window_operations():
    window = TerminalWindow("t")
    agent = make_agent_for_pid(0, window)
    agent.reparent_as_child("container")
    assert window.embedded
    assert window.parent == "container"
    agent.show()
    assert window.visible
    agent.move_to(0, 0, 800, 600)
    assert window.geometry == (0, 0, 800, 600)
    agent.focus()
    assert window.focused
    agent.hide()
    assert not window.visible


def test_closed_window_ignores_operations():
    window = TerminalWindow("t")
    window.close()
    window.show()
    window.move_to(1, 2, 3, 4)
    assert not window.visible
    assert window.geometry is None
    assert not window.is_valid()


def test_is_alive_without_process():
    agent = make_agent_for_pid(0)
    assert agent.is_alive() is False


def test_is_alive_tracks_process(child):
    agent = Agent(
        AgentKind.CLAUDE, "a", None, psutil.Process(child.pid), 0, "", set(), time.monotonic()
    )
    assert agent.is_alive() is True
    child.kill()
    child.wait()
    assert agent.is_alive() is False


def test_attach_jsonl_creates_probe(tmp_path):
    agent = make_agent_for_pid(0)
    assert agent.has_probe() is False
    path = tmp_path / "abc.jsonl"
    agent.attach_jsonl(str(path), None)
    assert agent.has_probe() is True
    assert agent.jsonl_path == path
    assert agent.probe.path == path


def test_jsonl_snapshot_is_copied():
    source = {"a.jsonl"}
    agent = Agent(AgentKind.CLAUDE, "a", None, None, 0, "C:\\p", source, 1.0)
    source.add("b.jsonl")
    assert agent.jsonl_snapshot == {"a.jsonl"}
    assert agent.cwd == "C:\\p"
    assert agent.waiting is False
    assert agent.title == ""