from typing import Any

import pytest

from voice_chat.cli import logging_utils
from voice_chat.core.state import SessionState


@pytest.fixture(autouse=True)
def reset_verbose_log_capture():
    """Ensure each test starts with logging disabled and no open files."""

    logging_utils.configure_verbose_log_capture(None)
    logging_utils.set_verbose_logging(False)
    yield
    logging_utils.configure_verbose_log_capture(None)
    logging_utils.set_verbose_logging(False)


def test_logger_verbose_writes_to_disk_even_when_disabled(tmp_path):
    log_file = tmp_path / "logs" / "session.log"
    logging_utils.configure_verbose_log_capture(log_file)

    logging_utils.LOGGER.verbose(logging_utils.HISTORY_LOG_LABEL, "two", "turns", end="!")

    logging_utils.configure_verbose_log_capture(None)

    data = log_file.read_text(encoding="utf-8")
    assert "[HISTORY] two turns" in data
    assert data.endswith("!")
    assert "\x1b" not in data


def test_verbose_output_hidden_from_console_when_disabled(capsys):
    logging_utils.LOGGER.verbose(logging_utils.AUDIO_LOG_LABEL, "device details")

    assert capsys.readouterr().out == ""


def test_state_transition_logs_when_capture_enabled(tmp_path):
    log_file = tmp_path / "session.log"
    logging_utils.configure_verbose_log_capture(log_file)

    logging_utils.log_state_transition(None, SessionState.RECORDING, "boot")

    logging_utils.configure_verbose_log_capture(None)

    contents = log_file.read_text(encoding="utf-8")
    assert "Entered RECORDING (boot)" in contents


def test_per_session_capture_generates_iso_filename(tmp_path):
    log_dir = tmp_path / "logs"
    logging_utils.configure_verbose_log_capture(log_dir, per_session=True)
    path = logging_utils.current_verbose_log_path()
    logging_utils.configure_verbose_log_capture(None)

    assert path is not None
    assert path.parent == log_dir
    assert "T" in path.stem
    assert path.stem[:4].isdigit()


def test_logger_log_includes_timestamp(capsys):
    logging_utils.LOGGER.log("TRACE", "plain output")

    out = capsys.readouterr().out.strip()
    assert out.startswith("[")
    assert "] [TRACE] plain output" in out


def test_logger_verbose_prints_when_enabled(capsys):
    logging_utils.set_verbose_logging(True)

    logging_utils.LOGGER.verbose("TEST", "message")

    assert "] [TEST] message" in capsys.readouterr().out
    assert logging_utils.is_verbose_logging_enabled()


def test_logger_log_with_exc_info_goes_to_stderr(capsys):
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        logging_utils.LOGGER.log(
            logging_utils.ERROR_LOG_LABEL,
            "Failure encountered",
            exc_info=True,
            error=True,
        )

    captured = capsys.readouterr()
    assert "RuntimeError: boom" in captured.err
    assert "Traceback" in captured.err
    assert captured.out == ""


def test_logger_log_exc_info_with_tuple(capsys):
    try:
        raise KeyError("missing")
    except KeyError as exc:
        info = (exc.__class__, exc, exc.__traceback__)
        logging_utils.LOGGER.log(logging_utils.ERROR_LOG_LABEL, "Tuple failure", exc_info=info)

    assert "KeyError: 'missing'" in capsys.readouterr().out


def test_logger_log_rejects_unknown_option():
    with pytest.raises(TypeError):
        bad_kwargs: dict[str, Any] = {"unsupported": True}
        logging_utils.LOGGER.log("TRACE", "noop", **bad_kwargs)


def test_logger_log_requires_source():
    with pytest.raises(ValueError):
        logging_utils.LOGGER.log("", "noop")


def test_logger_applies_color_for_known_label(capsys):
    logging_utils.LOGGER.log(logging_utils.TURN_LOG_LABEL, "colorful")

    out = capsys.readouterr().out
    assert "\033[" in out
    assert "[TURN]" in out


def test_strip_ansi_sequences_removes_codes():
    colored = "\033[31mhello\033[0m world"
    assert logging_utils.strip_ansi_sequences(colored) == "hello world"


def test_log_state_transition_skips_when_state_unchanged(monkeypatch):
    calls: list[tuple] = []
    monkeypatch.setattr(
        logging_utils.LOGGER,
        "verbose",
        lambda *args, **kwargs: calls.append(args),
    )

    logging_utils.log_state_transition(SessionState.IDLE, SessionState.IDLE, "noop")

    assert calls == []


def test_log_state_transition_formats_previous_and_new(monkeypatch):
    calls: list[tuple] = []
    monkeypatch.setattr(
        logging_utils.LOGGER,
        "verbose",
        lambda *args, **kwargs: calls.append(args),
    )

    logging_utils.log_state_transition(
        SessionState.AWAITING_BACKEND, SessionState.RESPONDING, "reply received"
    )

    assert calls == [
        (logging_utils.STATE_LOG_LABEL, "AWAITING_BACKEND -> RESPONDING (reply received)")
    ]
