import pytest

from voice_chat.chat.history import Turn
from voice_chat.chat.models import AudioPayload, ChatResponse, ExecutionSettings
from voice_chat.chat.session import ChatSettings, Session
from voice_chat.cli import logging_utils
from voice_chat.core.results import Err, ErrorKind, Ok, TurnError
from voice_chat.core.state import SessionState


def test_execution_settings_include_audio_only_when_requested():
    settings = ChatSettings(voice="coral", audio_format="mp3")

    text_only = settings.execution_settings(want_audio_response=False)
    spoken = settings.execution_settings(want_audio_response=True)

    assert text_only.audio is None
    assert text_only.wants_audio is False
    assert spoken.audio is not None
    assert spoken.audio.voice == "coral"
    assert spoken.audio.format == "mp3"


def test_chat_settings_defaults_match_configuration():
    settings = ChatSettings()

    assert settings.temperature == pytest.approx(0.7)
    assert settings.top_p == pytest.approx(0.95)
    assert settings.max_tokens == 800  # noqa: PLR2004
    assert settings.voice == "alloy"
    assert settings.audio_format == "wav"
    assert settings.language == "en"
    assert "helpful" in settings.system_instruction


def test_with_overrides_returns_new_settings():
    settings = ChatSettings()

    updated = settings.with_overrides(voice="echo")

    assert updated.voice == "echo"
    assert settings.voice == "alloy"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"temperature": 2.5},
        {"top_p": -0.1},
        {"max_tokens": 0},
    ],
)
def test_execution_settings_reject_out_of_range_values(kwargs):
    values = {"temperature": 0.7, "top_p": 0.95, "max_tokens": 800, "system_instruction": ""}
    values.update(kwargs)

    with pytest.raises(ValueError):
        ExecutionSettings(**values)


def test_session_transition_logs_state_change(tmp_path):
    log_file = tmp_path / "session.log"
    logging_utils.configure_verbose_log_capture(log_file)
    session = Session()

    session.transition(SessionState.RECORDING, "recording started")
    session.transition(SessionState.RECORDING, "ignored")
    logging_utils.configure_verbose_log_capture(None)

    assert session.state is SessionState.RECORDING
    contents = log_file.read_text(encoding="utf-8")
    assert "IDLE -> RECORDING (recording started)" in contents
    assert "ignored" not in contents


def test_clear_history_returns_session_to_idle():
    session = Session()
    session.history.append(Turn.user("hello"))
    session.state = SessionState.RESPONDING

    session.clear_history()

    assert len(session.history) == 0
    assert session.state is SessionState.IDLE


def test_sessions_do_not_share_history():
    first = Session()
    second = Session()

    first.history.append(Turn.user("hello"))

    assert len(second.history) == 0


def test_chat_response_helpers():
    assert ChatResponse().ok is True
    assert ChatResponse(audio=AudioPayload(b"", "audio/wav")).has_audio is False
    failed = ChatResponse(text="boom", error=TurnError(ErrorKind.BACKEND_FAILURE, "boom"))
    assert failed.ok is False
    assert str(failed.error) == "boom"


def test_result_types():
    assert Ok(3).ok is True
    assert Ok(3).value == 3  # noqa: PLR2004
    err = Err.of(ErrorKind.DEVICE_UNAVAILABLE, "no mic")
    assert err.ok is False
    assert err.error.kind is ErrorKind.DEVICE_UNAVAILABLE
    assert err.error.message == "no mic"
