from types import SimpleNamespace
from unittest import mock

from agentshub import constants
from agentshub.terminal import SpawnResult, build_command_line, spawn


def fake_proc(pid, name):
    return SimpleNamespace(info={"pid": pid, "name": name})


def test_command_line_without_cwd():
    assert build_command_line("claude_1_0", "claude.exe", None) == (
        'wt.exe -w -1 --title "claude_1_0" -- claude.exe'
    )


def test_command_line_with_cwd():
    line = build_command_line("t", "gemini.cmd", "C:\\work")
    assert line == 'wt.exe -w -1 --title "t" -d "C:\\work" -- gemini.cmd'


def test_command_line_empty_cwd_is_inherited():
    assert build_command_line("t", "copilot", "") == build_command_line("t", "copilot", None)
    assert " -d " not in build_command_line("t", "copilot", "")


def test_command_line_ends_with_command_tail():
    line = build_command_line("name", "prog --flag value", "/tmp")
    assert line.endswith(" -- prog --flag value")
    assert '--title "name"' in line


def test_empty_result_is_falsy():
    result = SpawnResult()
    assert not result
    assert result.pid == 0


def test_spawn_failure_when_launcher_missing():
    with mock.patch("agentshub.terminal.psutil.process_iter", return_value=[]), \
            mock.patch("agentshub.terminal.subprocess.Popen", side_effect=FileNotFoundError):
        result = spawn("t", "cmd", None)
    assert not result
    assert result.window is None
    assert result.process is None


def test_spawn_finds_new_terminal_host():
    existing = fake_proc(10, "OpenConsole.exe")
    other = fake_proc(11, "explorer.exe")
    new = fake_proc(4242, "OpenConsole.exe")
    iterations = [[existing, other], [existing, other], [existing, other, new]]
    found = object()
    with mock.patch("agentshub.terminal.psutil.process_iter", side_effect=iterations), \
            mock.patch("agentshub.terminal.psutil.Process", return_value=found) as proc_cls, \
            mock.patch("agentshub.terminal.subprocess.Popen") as popen, \
            mock.patch("agentshub.terminal.time.sleep") as sleep:
        result = spawn("tab", "cmd", None)
    assert result
    assert result.pid == 4242
    assert result.process is found
    assert result.window.title == "tab"
    proc_cls.assert_called_once_with(4242)
    assert popen.call_count == 1
    assert sleep.call_count == 1


def test_spawn_gives_up_after_poll_attempts():
    with mock.patch("agentshub.terminal.psutil.process_iter", return_value=[]), \
            mock.patch("agentshub.terminal.subprocess.Popen"), \
            mock.patch("agentshub.terminal.time.sleep") as sleep:
        result = spawn("tab", "cmd", None)
    assert not result
    assert sleep.call_count == constants.WT_WINDOW_POLL_ATTEMPTS