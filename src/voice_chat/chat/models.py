"""Value types exchanged between the orchestrator, its backends and the UI."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from voice_chat.core.results import TurnError

NO_TEXT_RESPONSE = "No text response received."


class ContentKind(str, Enum):
    TEXT = "text"
    AUDIO = "audio"
    OTHER = "other"


@dataclass(frozen=True)
class ContentItem:
    """One entry of a backend reply; ``kind`` decides which payload field is set."""

    kind: ContentKind
    text: Optional[str] = None
    data: Optional[bytes] = None
    mime_type: Optional[str] = None

    @classmethod
    def text_item(cls, text: str) -> "ContentItem":
        return cls(ContentKind.TEXT, text=text)

    @classmethod
    def audio_item(cls, data: bytes, mime_type: str) -> "ContentItem":
        return cls(ContentKind.AUDIO, data=data, mime_type=mime_type)

    @classmethod
    def other_item(cls, mime_type: Optional[str] = None) -> "ContentItem":
        return cls(ContentKind.OTHER, mime_type=mime_type)


@dataclass(frozen=True)
class CompletionMessage:
    """Normalized completion backend reply."""

    text: Optional[str] = None
    items: tuple[ContentItem, ...] = ()


@dataclass(frozen=True)
class AudioPayload:
    data: bytes
    mime_type: str

    @property
    def format(self) -> str:
        """Return the MIME subtype (``audio/mp3`` -> ``mp3``)."""

        _, _, subtype = self.mime_type.partition("/")
        return subtype or self.mime_type


@dataclass(frozen=True)
class ChatResponse:
    """What one turn hands back to the UI layer."""

    text: str = NO_TEXT_RESPONSE
    audio: Optional[AudioPayload] = None
    error: Optional[TurnError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def has_audio(self) -> bool:
        return self.audio is not None and bool(self.audio.data)


@dataclass(frozen=True)
class AudioOutputOptions:
    voice: str
    format: str


@dataclass(frozen=True)
class ExecutionSettings:
    """Sampling and output settings sent with every completion request."""

    temperature: float
    top_p: float
    max_tokens: int
    system_instruction: str
    audio: Optional[AudioOutputOptions] = None

    def __post_init__(self) -> None:
        if not 0.0 <= self.temperature <= 2.0:  # noqa: PLR2004
            raise ValueError(f"temperature must be within [0, 2], got {self.temperature}")
        if not 0.0 <= self.top_p <= 1.0:
            raise ValueError(f"top_p must be within [0, 1], got {self.top_p}")
        if self.max_tokens <= 0:
            raise ValueError(f"max_tokens must be positive, got {self.max_tokens}")

    @property
    def wants_audio(self) -> bool:
        return self.audio is not None


__all__ = [
    "NO_TEXT_RESPONSE",
    "AudioOutputOptions",
    "AudioPayload",
    "ChatResponse",
    "CompletionMessage",
    "ContentItem",
    "ContentKind",
    "ExecutionSettings",
]
