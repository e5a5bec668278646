import pytest

from agentshub.kinds import AgentKind, SpawnConfig, to_string


def test_all_kinds_have_expected_labels():
    assert to_string(AgentKind.CLAUDE) == "claude"
    assert to_string(AgentKind.COPILOT) == "copilot"
    assert to_string(AgentKind.GEMINI) == "gemini"


def test_labels_are_distinct():
    labels = {to_string(k) for k in AgentKind}
    assert len(labels) == len(AgentKind)


@pytest.mark.parametrize("kind", list(AgentKind))
def test_label_round_trips_to_kind(kind):
    assert AgentKind(to_string(kind)) is kind


def test_unknown_value_is_labelled_unknown():
    assert to_string("bogus") == "unknown"


def test_spawn_config_defaults_to_claude_inheriting_cwd():
    cfg = SpawnConfig()
    assert cfg.kind is AgentKind.CLAUDE
    assert cfg.cwd is None


def test_spawn_config_keeps_given_values(tmp_path):
    cfg = SpawnConfig(kind=AgentKind.GEMINI, cwd=tmp_path)
    assert cfg.kind is AgentKind.GEMINI
    assert cfg.cwd == tmp_path