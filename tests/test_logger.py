from agentshub.logger import Logger


def test_messages_are_formatted_and_flushed(tmp_path):
    path = tmp_path / "debug.log"
    with Logger(path) as log:
        log.logf("Agent %s: pid=%d\n", "a1", 42)
        assert path.read_text(encoding="utf-8") == "Agent a1: pid=42\n"


def test_message_without_args_is_written_verbatim(tmp_path):
    path = tmp_path / "debug.log"
    with Logger(path) as log:
        log.logf("100% done\n")
    assert path.read_text(encoding="utf-8") == "100% done\n"


def test_opening_truncates_existing_file(tmp_path):
    path = tmp_path / "debug.log"
    path.write_text("old content", encoding="utf-8")
    with Logger(path):
        pass
    assert path.read_text(encoding="utf-8") == ""


def test_messages_after_close_are_dropped(tmp_path):
    path = tmp_path / "debug.log"
    log = Logger(path)
    log.logf("first\n")
    log.close()
    log.logf("second\n")
    assert path.read_text(encoding="utf-8") == "first\n"


def test_unopenable_path_makes_logging_a_no_op(tmp_path):
    log = Logger(tmp_path)
    log.logf("ignored %s\n", "x")
    log.close()
    assert list(tmp_path.iterdir()) == []