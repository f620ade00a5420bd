"""Playback for assistant audio replies with a system-player fallback."""

from __future__ import annotations

import asyncio
import os
import shutil
import subprocess
import sys
from pathlib import Path
from typing import Callable, Optional

import numpy as np
import soundfile as sf

from voice_chat.cli.logging_utils import AUDIO_LOG_LABEL, ERROR_LOG_LABEL, LOGGER
from voice_chat.config import PLAYBACK_FALLBACK_ENABLED, RESPONSE_AUDIO_BASENAME
from voice_chat.core.results import ErrorKind, TurnError

from ._sounddevice import sounddevice as sd
from .resampler import LinearResampler
from .utils import device_info_dict, pcm16_to_wav_bytes

PCM16_RESPONSE_SAMPLE_RATE = 24000
FALLBACK_SAMPLE_RATES = (48000, 44100, 32000)

_FORMAT_EXTENSIONS = {
    "wav": "wav",
    "mp3": "mp3",
    "aac": "aac",
    "flac": "flac",
    "opus": "opus",
    "pcm16": "wav",
}


def launch_default_player(path: Path) -> None:
    """Hand ``path`` to whatever the host has registered for its file type."""

    target = str(path)
    if sys.platform.startswith("win"):
        startfile = getattr(os, "startfile")
        startfile(target)
        return
    opener = "open" if sys.platform == "darwin" else "xdg-open"
    executable = shutil.which(opener)
    if executable is None:
        raise FileNotFoundError(f"No default audio player launcher found ('{opener}' missing).")
    process = subprocess.Popen(
        [executable, target],
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
    )
    returncode = process.wait()
    if returncode != 0:
        raise OSError(f"'{opener}' exited with status {returncode} for {path.name}.")


def write_response_audio(
    audio_bytes: bytes,
    audio_format: str,
    directory: Optional[Path | str] = None,
    basename: str = RESPONSE_AUDIO_BASENAME,
) -> Path:
    """
    Persist reply audio to the scratch file that playback reads from.

    The file is overwritten on every turn and left in place afterwards so the
    last reply can be replayed by hand.
    """

    normalized = (audio_format or "").strip().lower()
    extension = _FORMAT_EXTENSIONS.get(normalized, normalized or "bin")
    payload = audio_bytes
    if normalized == "pcm16":
        payload = pcm16_to_wav_bytes(audio_bytes, PCM16_RESPONSE_SAMPLE_RATE)
    target_dir = Path(directory) if directory else Path.cwd()
    target = target_dir / f"{basename}.{extension}"
    target.write_bytes(payload)
    return target


class AudioPlayer:
    """Serializes playback so replies don't overlap and allows stop commands."""

    def __init__(
        self,
        *,
        fallback_enabled: bool = PLAYBACK_FALLBACK_ENABLED,
        launcher: Optional[Callable[[Path], None]] = None,
    ):
        self._fallback_enabled = fallback_enabled
        self._launcher = launcher or launch_default_player
        self._play_lock = asyncio.Lock()
        self._is_playing = asyncio.Event()
        self._override_logged = False

    async def play(self, path: Path | str) -> Optional[TurnError]:
        """
        Play an audio file and wait for it to finish.

        Device or codec failures are not returned: the file is handed to the
        host's default player instead, and only that launcher's failure is
        reported back as a ``PLAYBACK_FAILURE``.
        """

        audio_path = Path(path)
        if not audio_path.is_file():
            message = f"Audio file not found: {audio_path}"
            LOGGER.log(ERROR_LOG_LABEL, message, error=True)
            return TurnError(ErrorKind.PLAYBACK_FAILURE, message)

        async with self._play_lock:
            self._is_playing.set()
            try:
                LOGGER.verbose(AUDIO_LOG_LABEL, f"Starting audio playback of {audio_path.name}")
                await asyncio.to_thread(self._play_blocking, audio_path)
            except Exception as exc:
                LOGGER.log(AUDIO_LOG_LABEL, f"Error playing audio: {exc}")
                return await self._play_with_fallback(audio_path)
            finally:
                self._is_playing.clear()

        LOGGER.verbose(AUDIO_LOG_LABEL, "Audio playback completed.")
        return None

    async def stop(self) -> bool:
        """Stop any in-progress playback, returning True if something was interrupted."""

        if not self._is_playing.is_set():
            return False
        await asyncio.to_thread(sd.stop)
        return True

    async def _play_with_fallback(self, path: Path) -> Optional[TurnError]:
        if not self._fallback_enabled:
            return TurnError(ErrorKind.PLAYBACK_FAILURE, f"Unable to play {path.name}.")

        LOGGER.log(AUDIO_LOG_LABEL, "Attempting to play with system default player...")
        try:
            await asyncio.to_thread(self._launcher, path)
        except Exception as exc:
            message = f"Fallback playback failed: {exc}"
            LOGGER.log(ERROR_LOG_LABEL, message, error=True)
            return TurnError(ErrorKind.PLAYBACK_FAILURE, message)
        return None

    def _play_blocking(self, path: Path) -> None:
        samples, source_rate = sf.read(str(path), dtype="float32", always_2d=False)
        samples = np.asarray(samples, dtype=np.float32)
        if samples.size == 0:
            return

        channels = 1 if samples.ndim == 1 else samples.shape[1]
        device = self._detect_output_device()
        playback_rate = self._select_playback_sample_rate(int(source_rate), device, channels)
        if playback_rate != source_rate:
            LOGGER.verbose(
                AUDIO_LOG_LABEL,
                f"Resampling reply audio {source_rate} Hz -> {playback_rate} Hz for playback.",
            )
            samples = LinearResampler(int(source_rate), playback_rate).process(samples)

        sd.play(samples, samplerate=playback_rate, device=device)
        sd.wait()

    @staticmethod
    def _detect_output_device() -> Optional[int]:
        device = sd.default.device
        candidate = device[1] if isinstance(device, (list, tuple)) else device
        return candidate if isinstance(candidate, int) and candidate >= 0 else None

    def _select_playback_sample_rate(
        self, preferred_rate: int, device: Optional[int], channels: int
    ) -> int:
        candidates: list[int] = []
        default_rate = self._device_default_sample_rate(device)
        for rate in (preferred_rate, default_rate, *FALLBACK_SAMPLE_RATES):
            if rate and rate > 0 and rate not in candidates:
                candidates.append(int(rate))

        for rate in candidates:
            if self._is_rate_supported(rate, device, channels):
                if rate != preferred_rate:
                    self._log_playback_override(preferred_rate, rate)
                return rate

        return preferred_rate

    @staticmethod
    def _device_default_sample_rate(device: Optional[int]) -> Optional[int]:
        try:
            if device is None:
                raw = sd.query_devices(kind="output")
            else:
                raw = sd.query_devices(device)
        except Exception:
            return None
        rate = device_info_dict(raw).get("default_samplerate")
        if isinstance(rate, (int, float)):
            return int(rate)
        return None

    @staticmethod
    def _is_rate_supported(rate: int, device: Optional[int], channels: int) -> bool:
        try:
            sd.check_output_settings(device=device, samplerate=rate, channels=channels)
            return True
        except Exception:
            return False

    def _log_playback_override(self, requested: int, selected: int) -> None:
        if self._override_logged:
            return
        self._override_logged = True
        LOGGER.log(
            AUDIO_LOG_LABEL,
            f"Output device does not support {requested} Hz; "
            f"reply audio will play at {selected} Hz.",
        )


__all__ = ["AudioPlayer", "launch_default_player", "write_response_audio"]
