"""Assistant/chat configuration helpers."""

from __future__ import annotations

import os
import sys

from .base import _DEFAULTS, _env_float, _env_int, _normalize_language

_ASSISTANT = _DEFAULTS.get("assistant", {})

AUDIO_FORMAT_CHOICES: tuple[str, ...] = ("wav", "mp3", "aac", "flac", "opus", "pcm16")
VOICE_CHOICES: tuple[str, ...] = (
    "alloy",
    "ash",
    "ballad",
    "coral",
    "echo",
    "sage",
    "shimmer",
    "verse",
)


def _bounded_float(name: str, default: float, lower: float, upper: float) -> float:
    value = _env_float(name, default)
    if lower <= value <= upper:
        return value
    sys.stderr.write(
        f"{name}={value!r} is outside [{lower}, {upper}]; falling back to {default!r}.\n"
    )
    return default


def _normalize_audio_format(value: str | None, fallback: str = "wav") -> str:
    normalized = (value or "").strip().lower()
    if normalized in AUDIO_FORMAT_CHOICES:
        return normalized
    sys.stderr.write(
        f"Unknown ASSISTANT_AUDIO_FORMAT '{value or 'N/A'}'; defaulting to '{fallback}'.\n"
    )
    return fallback


def _normalize_voice(value: str | None, fallback: str = "alloy") -> str:
    normalized = (value or "").strip().lower()
    if normalized in VOICE_CHOICES:
        return normalized
    sys.stderr.write(f"Unknown ASSISTANT_VOICE '{value or 'N/A'}'; defaulting to '{fallback}'.\n")
    return fallback


ASSISTANT_SYSTEM_PROMPT = (
    os.getenv("ASSISTANT_SYSTEM_PROMPT") or _ASSISTANT.get("system_prompt", "")
).strip()
ASSISTANT_TEMPERATURE = _bounded_float(
    "ASSISTANT_TEMPERATURE", float(_ASSISTANT.get("temperature", 0.7)), 0.0, 2.0
)
ASSISTANT_TOP_P = _bounded_float("ASSISTANT_TOP_P", float(_ASSISTANT.get("top_p", 0.95)), 0.0, 1.0)
ASSISTANT_MAX_TOKENS = _env_int("ASSISTANT_MAX_TOKENS", int(_ASSISTANT.get("max_tokens", 800)))
if ASSISTANT_MAX_TOKENS <= 0:
    sys.stderr.write("ASSISTANT_MAX_TOKENS must be positive; using 800.\n")
    ASSISTANT_MAX_TOKENS = 800
ASSISTANT_VOICE = _normalize_voice(os.getenv("ASSISTANT_VOICE") or _ASSISTANT.get("voice"))
ASSISTANT_AUDIO_FORMAT = _normalize_audio_format(
    os.getenv("ASSISTANT_AUDIO_FORMAT") or _ASSISTANT.get("audio_format")
)
ASSISTANT_LANGUAGE = _normalize_language(
    os.getenv("ASSISTANT_LANGUAGE") or _ASSISTANT.get("language")
)

__all__ = [
    "AUDIO_FORMAT_CHOICES",
    "VOICE_CHOICES",
    "ASSISTANT_SYSTEM_PROMPT",
    "ASSISTANT_TEMPERATURE",
    "ASSISTANT_TOP_P",
    "ASSISTANT_MAX_TOKENS",
    "ASSISTANT_VOICE",
    "ASSISTANT_AUDIO_FORMAT",
    "ASSISTANT_LANGUAGE",
]
