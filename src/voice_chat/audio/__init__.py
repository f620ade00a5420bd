"""Audio capture and playback utilities with lazy imports to avoid cycles."""

from __future__ import annotations

from typing import TYPE_CHECKING

__all__ = ["AudioBuffer", "AudioCapture", "AudioPlayer"]


def __getattr__(name: str):
    if name in ("AudioBuffer", "AudioCapture"):
        from . import capture as _capture

        return getattr(_capture, name)
    if name == "AudioPlayer":
        from .playback import AudioPlayer as _AudioPlayer

        return _AudioPlayer
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


if TYPE_CHECKING:  # pragma: no cover - import-time only
    from .capture import AudioBuffer as AudioBuffer
    from .capture import AudioCapture as AudioCapture
    from .playback import AudioPlayer as AudioPlayer
