"""
Microphone capture for a single conversational turn.

A recording runs until the caller's stop signal fires or the deadline passes,
whichever comes first, and returns the PCM16 frames gathered in between.
"""

from __future__ import annotations

import asyncio
import inspect
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Optional

from voice_chat.cli.logging_utils import AUDIO_LOG_LABEL, ERROR_LOG_LABEL, LOGGER
from voice_chat.config import (
    AUDIO_INPUT_DEVICE,
    BUFFER_SIZE,
    CAPTURE_FLUSH_TIMEOUT_SECONDS,
    CHANNELS,
    DTYPE,
    SAMPLE_RATE,
)
from voice_chat.core.exceptions import DeviceUnavailableError
from voice_chat.core.results import Err, ErrorKind, Ok, Result

from ._sounddevice import sounddevice as sd
from .utils import PCM16_SAMPLE_WIDTH, device_info_dict, pcm16_to_wav_bytes


@dataclass(frozen=True)
class AudioBuffer:
    """Raw PCM16 audio plus the format needed to interpret it."""

    pcm: bytes
    sample_rate: int = SAMPLE_RATE
    channels: int = CHANNELS

    @classmethod
    def empty(cls, sample_rate: int = SAMPLE_RATE, channels: int = CHANNELS) -> "AudioBuffer":
        return cls(b"", sample_rate, channels)

    @property
    def is_empty(self) -> bool:
        return not self.pcm

    @property
    def frame_count(self) -> int:
        return len(self.pcm) // (PCM16_SAMPLE_WIDTH * max(self.channels, 1))

    @property
    def duration_seconds(self) -> float:
        if self.sample_rate <= 0:
            return 0.0
        return self.frame_count / self.sample_rate

    def to_wav(self) -> bytes:
        return pcm16_to_wav_bytes(self.pcm, self.sample_rate, self.channels)


def _discard_unstarted(stop_signal: Optional[Awaitable[Any]]) -> None:
    if (
        inspect.iscoroutine(stop_signal)
        and inspect.getcoroutinestate(stop_signal) == inspect.CORO_CREATED
    ):
        stop_signal.close()


class StopSource(str, Enum):
    MANUAL = "manual"
    TIMER = "timer"


class CaptureSession:
    """
    Transient state for one recording.

    The stop flag is committed at most once; the device callback thread and the
    two cancellation tasks all go through the same lock.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop):
        self._loop = loop
        self._lock = threading.Lock()
        self._frames: list[bytes] = []
        self._stop_source: Optional[StopSource] = None
        self.stop_requested = asyncio.Event()
        self.device_finished = asyncio.Event()

    @property
    def stop_source(self) -> Optional[StopSource]:
        return self._stop_source

    @property
    def stopped(self) -> bool:
        return self._stop_source is not None

    def request_stop(self, source: StopSource) -> bool:
        """Commit the stop flag; returns False when another source already won."""

        with self._lock:
            if self._stop_source is not None:
                return False
            self._stop_source = source
        self._loop.call_soon_threadsafe(self.stop_requested.set)
        return True

    def append_frames(self, data: bytes) -> bool:
        with self._lock:
            if self._stop_source is not None:
                return False
            self._frames.append(data)
            return True

    def mark_device_finished(self) -> None:
        if self._loop.is_closed():
            return
        self._loop.call_soon_threadsafe(self.device_finished.set)

    def collect(self) -> bytes:
        with self._lock:
            return b"".join(self._frames)


class AudioCapture:
    """Records microphone input into an in-memory buffer."""

    def __init__(
        self,
        *,
        sample_rate: int = SAMPLE_RATE,
        channels: int = CHANNELS,
        dtype: str = DTYPE,
        blocksize: int = BUFFER_SIZE,
        device_override: Optional[str] = AUDIO_INPUT_DEVICE,
        flush_timeout_seconds: float = CAPTURE_FLUSH_TIMEOUT_SECONDS,
    ):
        self.sample_rate = sample_rate
        self.channels = channels
        self.dtype = dtype
        self.blocksize = blocksize
        self.device_override = device_override
        self.flush_timeout_seconds = flush_timeout_seconds
        self.input_device: Any = None

    def probe(self) -> Result[None]:
        """Check once whether an input device can be used for this session."""

        try:
            device = self._select_input_device()
            self._ensure_input_settings(device)
        except DeviceUnavailableError as exc:
            LOGGER.log(AUDIO_LOG_LABEL, f"Audio capture unavailable: {exc}")
            return Err.of(ErrorKind.DEVICE_UNAVAILABLE, str(exc))
        self.input_device = device
        LOGGER.verbose(AUDIO_LOG_LABEL, f"Input device: {self._describe_device(device)}")
        return Ok(None)

    async def record(
        self,
        max_duration_seconds: float,
        stop_signal: Optional[Awaitable[Any]] = None,
    ) -> Result[AudioBuffer]:
        """
        Capture audio until ``stop_signal`` resolves or ``max_duration_seconds`` elapse.

        Returns an empty buffer (not an error) when nothing was captured, and a
        ``DEVICE_UNAVAILABLE`` error when the input stream cannot be opened.
        """

        if max_duration_seconds <= 0:
            raise ValueError("max_duration_seconds must be positive")

        session = CaptureSession(asyncio.get_running_loop())
        try:
            stream = self._open_stream(session)
        except DeviceUnavailableError as exc:
            LOGGER.log(ERROR_LOG_LABEL, f"Unable to open microphone: {exc}", error=True)
            _discard_unstarted(stop_signal)
            return Err.of(ErrorKind.DEVICE_UNAVAILABLE, str(exc))

        watchers: list[asyncio.Future[Any]] = []
        try:
            stream.start()
            LOGGER.verbose(
                AUDIO_LOG_LABEL,
                f"Recording started ({self.sample_rate} Hz, max {max_duration_seconds:.1f}s)",
            )
            watchers.append(
                asyncio.ensure_future(self._stop_after_deadline(session, max_duration_seconds))
            )
            if stop_signal is not None:
                watchers.append(asyncio.ensure_future(self._stop_on_signal(session, stop_signal)))
            await session.stop_requested.wait()
            await self._stop_device(stream, session)
        except Exception as exc:
            LOGGER.log(ERROR_LOG_LABEL, f"Audio capture failed: {exc}", error=True)
            return Err.of(ErrorKind.DEVICE_UNAVAILABLE, f"Audio capture failed: {exc}")
        finally:
            for watcher in watchers:
                watcher.cancel()
            if watchers:
                await asyncio.gather(*watchers, return_exceptions=True)
            _discard_unstarted(stop_signal)
            self._close_stream(stream)

        buffer = AudioBuffer(session.collect(), self.sample_rate, self.channels)
        LOGGER.verbose(
            AUDIO_LOG_LABEL,
            f"Recording stopped by {session.stop_source.value if session.stop_source else '?'}; "
            f"captured {len(buffer.pcm)} bytes (~{buffer.duration_seconds:.2f}s)",
        )
        return Ok(buffer)

    async def _stop_after_deadline(self, session: CaptureSession, seconds: float) -> None:
        await asyncio.sleep(seconds)
        if session.request_stop(StopSource.TIMER):
            LOGGER.verbose(AUDIO_LOG_LABEL, f"Recording limit of {seconds:.1f}s reached")

    async def _stop_on_signal(self, session: CaptureSession, stop_signal: Awaitable[Any]) -> None:
        try:
            await stop_signal
        except EOFError:
            LOGGER.verbose(AUDIO_LOG_LABEL, "Stop signal closed; waiting for the recording limit")
            return
        if session.request_stop(StopSource.MANUAL):
            LOGGER.verbose(AUDIO_LOG_LABEL, "Recording stopped by user")

    async def _stop_device(self, stream, session: CaptureSession) -> None:
        await asyncio.to_thread(stream.stop)
        try:
            await asyncio.wait_for(session.device_finished.wait(), self.flush_timeout_seconds)
        except asyncio.TimeoutError:
            LOGGER.log(
                AUDIO_LOG_LABEL,
                f"Input stream did not confirm stop within {self.flush_timeout_seconds:.1f}s",
            )

    def _open_stream(self, session: CaptureSession):
        device = self._select_input_device()
        self._ensure_input_settings(device)
        self.input_device = device

        def _callback(indata, frames, time_info, status):
            if status:
                LOGGER.verbose(AUDIO_LOG_LABEL, f"Input callback status: {status}")
            session.append_frames(indata.copy().tobytes())

        try:
            return sd.InputStream(
                samplerate=self.sample_rate,
                channels=self.channels,
                dtype=self.dtype,
                blocksize=self.blocksize,
                callback=_callback,
                finished_callback=session.mark_device_finished,
                device=device,
            )
        except Exception as exc:
            raise DeviceUnavailableError(
                "Unable to initialize audio input stream. "
                "Verify that a microphone is connected and available. "
                "Set AUDIO_INPUT_DEVICE to override the default device."
            ) from exc

    @staticmethod
    def _close_stream(stream) -> None:
        try:
            stream.close()
        except Exception as exc:  # pragma: no cover - depends on host audio stack
            LOGGER.verbose(AUDIO_LOG_LABEL, f"Ignoring error while closing input stream: {exc}")

    def _ensure_input_settings(self, device) -> None:
        try:
            sd.check_input_settings(
                device=device,
                channels=self.channels,
                dtype=self.dtype,
                samplerate=self.sample_rate,
            )
        except DeviceUnavailableError:
            raise
        except Exception as exc:
            raise DeviceUnavailableError(
                f"Microphone {self._describe_device(device)} does not accept "
                f"{self.sample_rate} Hz / {self.channels} channel(s): {exc}"
            ) from exc

    def _select_input_device(self):
        """
        Determine which audio input device to use.

        Prefers the explicit AUDIO_INPUT_DEVICE override, then the system default,
        then falls back to the first enumerated input device with sufficient channels.
        """

        override = self._parse_device_override(self.device_override)
        if override is not None:
            self._validate_device(override)
            return override

        default_device = self._coerce_input_index(sd.default.device)
        if default_device is not None and default_device >= 0:
            if self._device_is_valid(default_device):
                return default_device

        return self._first_available_input_device()

    @staticmethod
    def _parse_device_override(value):
        candidate = (value or "").strip()
        if not candidate:
            return None
        try:
            return int(candidate)
        except ValueError:
            return candidate

    @staticmethod
    def _coerce_input_index(device):
        candidate = device[0] if isinstance(device, (list, tuple)) else device
        return candidate if isinstance(candidate, int) else None

    def _device_is_valid(self, device) -> bool:
        try:
            sd.query_devices(device)
            return True
        except DeviceUnavailableError:
            raise
        except Exception:
            return False

    def _validate_device(self, device) -> None:
        try:
            sd.query_devices(device)
        except DeviceUnavailableError:
            raise
        except Exception as exc:
            raise DeviceUnavailableError(
                f"AUDIO_INPUT_DEVICE '{device}' is not recognized by sounddevice."
            ) from exc

    def _first_available_input_device(self):
        try:
            devices = sd.query_devices()
        except DeviceUnavailableError:
            raise
        except Exception as exc:
            raise DeviceUnavailableError("Unable to query audio devices via PortAudio.") from exc

        for idx, entry in enumerate(self._iter_device_records(devices)):
            max_channels = entry.get("max_input_channels")
            if isinstance(max_channels, (int, float)) and int(max_channels) >= self.channels:
                return idx

        raise DeviceUnavailableError(
            "No audio input devices with the required channel count were found. "
            "Connect a microphone and retry."
        )

    def _describe_device(self, device) -> str:
        if device is None:
            return "system default"
        try:
            info = device_info_dict(sd.query_devices(device))
        except Exception:
            return str(device)
        name = info.get("name") or "Unknown device"
        index = info.get("index", device)
        return f"{name} (id {index})"

    @staticmethod
    def _iter_device_records(devices: object) -> list[dict[str, object]]:
        if isinstance(devices, (list, tuple)):
            return [device_info_dict(item) for item in devices]
        return [device_info_dict(devices)]


__all__ = ["AudioBuffer", "AudioCapture", "CaptureSession", "StopSource"]
