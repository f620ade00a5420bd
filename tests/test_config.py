from pathlib import Path

import pytest

from voice_chat.config import base, chat_settings

EXPECTED_INT_VALUE = 42
EXPECTED_FLOAT_VALUE = 0.5


def test_defaults_file_is_loaded():
    assert base.DEFAULTS_PATH.exists()
    assert base.SAMPLE_RATE == 16000  # noqa: PLR2004
    assert base.CHANNELS == 1
    assert base.OPENAI_CHAT_MODEL == "gpt-4o-audio-preview"
    assert base.OPENAI_TRANSCRIPTION_MODEL == "whisper-1"
    assert base.MAX_RECORD_SECONDS == pytest.approx(10.0)


def test_persist_env_value_updates_existing_entries(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    env_path = tmp_path / ".env"
    monkeypatch.setattr(base, "ENV_PATH", env_path)

    assert base._persist_env_value("FOO", "1") is True
    assert base._persist_env_value("BAR", "2") is True
    assert base._persist_env_value("FOO", "updated") is True

    assert env_path.read_text(encoding="utf-8") == "FOO=updated\nBAR=2\n"


def test_env_bool_parses_truthy_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FLAG", "Yes")
    assert base._env_bool("FLAG") is True
    monkeypatch.setenv("FLAG", "off")
    assert base._env_bool("FLAG", default=True) is False
    monkeypatch.delenv("FLAG")
    assert base._env_bool("FLAG", default=True) is True


def test_env_numbers_fall_back_on_invalid_values(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("NUMBER", str(EXPECTED_INT_VALUE))
    assert base._env_int("NUMBER", 1) == EXPECTED_INT_VALUE
    monkeypatch.setenv("NUMBER", str(EXPECTED_FLOAT_VALUE))
    assert base._env_float("NUMBER", 1.0) == EXPECTED_FLOAT_VALUE

    monkeypatch.setenv("NUMBER", "many")
    assert base._env_int("NUMBER", 7) == 7  # noqa: PLR2004
    assert base._env_float("NUMBER", 1.5) == 1.5  # noqa: PLR2004
    assert "Invalid value for NUMBER" in capsys.readouterr().err


def test_coerce_path_resolves_relative_to_project_root():
    assert base._coerce_path("logs") == (base.PROJECT_ROOT / "logs").resolve()


def test_normalize_language_defaults_when_blank():
    assert base._normalize_language("  fr ") == "fr"
    assert base._normalize_language("   ") == "en"
    assert base._normalize_language(None, fallback="de") == "de"


def test_prompt_for_api_key_skips_when_not_interactive(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(base.sys.stdin, "isatty", lambda: False, raising=False)

    assert base._prompt_for_api_key() is None


def test_audio_format_normalization(capsys: pytest.CaptureFixture[str]) -> None:
    assert chat_settings._normalize_audio_format(" MP3 ") == "mp3"
    assert chat_settings._normalize_audio_format("ogg") == "wav"
    assert "Unknown ASSISTANT_AUDIO_FORMAT 'ogg'" in capsys.readouterr().err


def test_voice_normalization() -> None:
    assert chat_settings._normalize_voice("Shimmer") == "shimmer"
    assert chat_settings._normalize_voice(None) == "alloy"


def test_bounded_float_rejects_out_of_range(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("ASSISTANT_TEMPERATURE", "3.5")

    value = chat_settings._bounded_float("ASSISTANT_TEMPERATURE", 0.7, 0.0, 2.0)

    assert value == pytest.approx(0.7)
    assert "outside [0.0, 2.0]" in capsys.readouterr().err
