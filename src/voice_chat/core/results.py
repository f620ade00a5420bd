"""Explicit success/error results returned across component boundaries."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar, Union

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Failure categories surfaced by the turn pipeline."""

    DEVICE_UNAVAILABLE = "device_unavailable"
    EMPTY_CAPTURE = "empty_capture"
    TRANSCRIPTION_FAILED = "transcription_failed"
    MISSING_AUDIO_INPUT = "missing_audio_input"
    BACKEND_FAILURE = "backend_failure"
    PLAYBACK_FAILURE = "playback_failure"


@dataclass(frozen=True)
class TurnError:
    kind: ErrorKind
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    error: TurnError

    @property
    def ok(self) -> bool:
        return False

    @classmethod
    def of(cls, kind: ErrorKind, message: str) -> "Err":
        return cls(TurnError(kind, message))


Result = Union[Ok[T], Err]

__all__ = ["Err", "ErrorKind", "Ok", "Result", "TurnError"]
