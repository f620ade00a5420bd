"""
Shared configuration helpers and audio/OpenAI settings for the voice chat client.

Defaults live in ``config/defaults.toml`` and can be overridden via environment
variables or CLI flags.
"""

from __future__ import annotations

import os
import sys
from getpass import getpass
from pathlib import Path

import tomllib
from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parents[3]
DEFAULTS_PATH = PROJECT_ROOT / "config" / "defaults.toml"
ENV_PATH = PROJECT_ROOT / ".env"

load_dotenv(ENV_PATH)

if not DEFAULTS_PATH.exists():  # pragma: no cover - configuration issue
    raise FileNotFoundError(
        f"Missing configuration defaults at {DEFAULTS_PATH}. Ensure config/defaults.toml exists."
    )

with DEFAULTS_PATH.open("rb") as defaults_file:
    _DEFAULTS = tomllib.load(defaults_file)


def _coerce_path(value: str | Path) -> Path:
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = (PROJECT_ROOT / path).resolve()
    return path


def _env_bool(name: str, default: bool = False) -> bool:
    """Return True when the env var is set to a truthy value."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        _warn_invalid_env_value(name, value, default)
        return default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        _warn_invalid_env_value(name, value, default)
        return default


def _env_path(name: str, default: str) -> Path:
    raw = os.getenv(name, default)
    return _coerce_path(raw)


def _normalize_language(value: str | None, fallback: str = "en") -> str:
    """Return a normalized language tag, defaulting to ``fallback`` when empty."""

    if value is None:
        return fallback
    trimmed = value.strip()
    return trimmed or fallback


def _persist_env_value(key: str, value: str) -> bool:
    """Write or update a key=value entry in the repo's .env file, returning True on success."""

    existing_lines: list[str] = []
    replaced = False

    if ENV_PATH.exists():
        try:
            existing_lines = ENV_PATH.read_text(encoding="utf-8").splitlines()
        except OSError as exc:
            sys.stderr.write(f"Unable to read {ENV_PATH}: {exc}\n")
            return False

    new_lines: list[str] = []
    for line in existing_lines:
        if line.startswith(f"{key}="):
            new_lines.append(f"{key}={value}")
            replaced = True
        else:
            new_lines.append(line)

    if not replaced:
        new_lines.append(f"{key}={value}")

    contents = "\n".join(new_lines).rstrip()
    try:
        ENV_PATH.write_text((contents + "\n") if contents else "\n", encoding="utf-8")
    except OSError as exc:
        sys.stderr.write(f"Unable to write {ENV_PATH}: {exc}\n")
        return False
    return True


def _warn_invalid_env_value(name: str, value: str | None, default: object) -> None:
    """Emit a warning when env overrides cannot be parsed."""

    sys.stderr.write(f"Invalid value for {name}={value!r}; falling back to {default!r}.\n")


def _prompt_for_api_key() -> str | None:
    """Interactively request and persist the OpenAI API key when missing."""

    if not sys.stdin.isatty():  # Non-interactive session (CI, tests, etc.)
        return None

    sys.stderr.write(
        "\nOPENAI_API_KEY is missing. Paste your OpenAI API key to store it in .env:\n"
    )
    try:
        api_key = getpass("OpenAI API key: ").strip()
    except (EOFError, KeyboardInterrupt):  # pragma: no cover - interactive prompt
        sys.stderr.write("\nNo API key provided; aborting.\n")
        return None

    if not api_key:
        sys.stderr.write("Empty API key provided; aborting.\n")
        return None

    _persist_env_value("OPENAI_API_KEY", api_key)
    os.environ["OPENAI_API_KEY"] = api_key
    sys.stderr.write("Saved API key to .env\n\n")
    return api_key


# Audio Configuration
_AUDIO = _DEFAULTS["audio"]
SAMPLE_RATE = _env_int("SAMPLE_RATE", _AUDIO["sample_rate"])
CHANNELS = _env_int("CHANNELS", _AUDIO["channels"])
DTYPE = os.getenv("DTYPE", _AUDIO["dtype"])
BUFFER_SIZE = _env_int("BUFFER_SIZE", _AUDIO["buffer_size"])
AUDIO_INPUT_DEVICE = os.getenv("AUDIO_INPUT_DEVICE")
MAX_RECORD_SECONDS = _env_float("MAX_RECORD_SECONDS", _AUDIO["max_record_seconds"])
CAPTURE_FLUSH_TIMEOUT_SECONDS = _env_float(
    "CAPTURE_FLUSH_TIMEOUT_SECONDS", _AUDIO.get("flush_timeout_seconds", 2.0)
)

# Playback Configuration
_PLAYBACK = _DEFAULTS.get("playback", {})
RESPONSE_AUDIO_BASENAME = (
    os.getenv("RESPONSE_AUDIO_BASENAME")
    or _PLAYBACK.get("response_audio_basename", "assistant_response")
).strip()
PLAYBACK_FALLBACK_ENABLED = _env_bool(
    "PLAYBACK_FALLBACK_ENABLED", _PLAYBACK.get("fallback_enabled", True)
)

# OpenAI API Configuration
_OPENAI = _DEFAULTS["openai"]
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY") or _prompt_for_api_key()
OPENAI_CHAT_MODEL = os.getenv("OPENAI_CHAT_MODEL", _OPENAI["chat_model"])
OPENAI_TRANSCRIPTION_MODEL = os.getenv(
    "OPENAI_TRANSCRIPTION_MODEL", _OPENAI["transcription_model"]
)
OPENAI_TIMEOUT_SECONDS = _env_float("OPENAI_TIMEOUT_SECONDS", _OPENAI.get("timeout_seconds", 60.0))

_LOGGING = _DEFAULTS.get("logging", {})
VERBOSE_LOG_CAPTURE_ENABLED = _env_bool(
    "VERBOSE_LOG_CAPTURE_ENABLED", _LOGGING.get("verbose_capture_enabled", False)
)
if VERBOSE_LOG_CAPTURE_ENABLED:
    _DEFAULT_VERBOSE_DIR = _LOGGING.get("verbose_log_directory")
    default_verbose_dir = (
        _DEFAULT_VERBOSE_DIR.strip()
        if isinstance(_DEFAULT_VERBOSE_DIR, str) and _DEFAULT_VERBOSE_DIR.strip()
        else "logs"
    )

    VERBOSE_LOG_DIRECTORY = _env_path("VERBOSE_LOG_DIRECTORY", default_verbose_dir)
else:
    VERBOSE_LOG_DIRECTORY = None

if not OPENAI_API_KEY:
    raise ValueError(
        "OPENAI_API_KEY not configured. "
        "Set the variable manually or rerun in an interactive shell to supply it."
    )

__all__ = [
    "PROJECT_ROOT",
    "DEFAULTS_PATH",
    "ENV_PATH",
    "_DEFAULTS",
    "_coerce_path",
    "_env_bool",
    "_env_int",
    "_env_float",
    "_env_path",
    "_normalize_language",
    "_persist_env_value",
    "_prompt_for_api_key",
    "SAMPLE_RATE",
    "CHANNELS",
    "DTYPE",
    "BUFFER_SIZE",
    "AUDIO_INPUT_DEVICE",
    "MAX_RECORD_SECONDS",
    "CAPTURE_FLUSH_TIMEOUT_SECONDS",
    "RESPONSE_AUDIO_BASENAME",
    "PLAYBACK_FALLBACK_ENABLED",
    "OPENAI_API_KEY",
    "OPENAI_CHAT_MODEL",
    "OPENAI_TRANSCRIPTION_MODEL",
    "OPENAI_TIMEOUT_SECONDS",
    "VERBOSE_LOG_CAPTURE_ENABLED",
    "VERBOSE_LOG_DIRECTORY",
]
