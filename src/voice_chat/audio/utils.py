"""Shared helpers for audio capture/playback modules."""

from __future__ import annotations

import io
import wave
from collections.abc import Mapping

__all__ = ["device_info_dict", "pcm16_to_wav_bytes"]

PCM16_SAMPLE_WIDTH = 2


def device_info_dict(info: object) -> dict[str, object]:
    """Return a plain dict from sounddevice info objects for logging/debugging."""
    if isinstance(info, dict):
        return dict(info)
    if isinstance(info, Mapping):
        return dict(info.items())
    if hasattr(info, "__dict__"):
        return dict(vars(info))
    return {}


def pcm16_to_wav_bytes(pcm: bytes, sample_rate: int, channels: int = 1) -> bytes:
    """Wrap raw PCM16 frames in an in-memory RIFF/WAV container."""

    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav_file:
        wav_file.setnchannels(channels)
        wav_file.setsampwidth(PCM16_SAMPLE_WIDTH)
        wav_file.setframerate(sample_rate)
        wav_file.writeframes(pcm)
    return buffer.getvalue()
