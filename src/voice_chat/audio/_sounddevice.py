"""
Lazy handle on ``sounddevice`` so importing the audio modules never requires
PortAudio; the native library is only loaded on first device access.
"""

from __future__ import annotations

from types import ModuleType
from typing import Any, Optional

from voice_chat.core.exceptions import DeviceUnavailableError


class _LazySoundDevice:
    def __init__(self) -> None:
        self._module: Optional[ModuleType] = None

    def load(self) -> ModuleType:
        if self._module is None:
            try:
                import sounddevice as real_sounddevice
            except (ImportError, OSError) as exc:
                raise DeviceUnavailableError(
                    f"sounddevice/PortAudio is not available on this system: {exc}"
                ) from exc
            self._module = real_sounddevice
        return self._module

    def __getattr__(self, name: str) -> Any:
        return getattr(self.load(), name)


sounddevice = _LazySoundDevice()

__all__ = ["sounddevice"]
