"""Ordered dialogue history sent as context with every completion request."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional, Union


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class TextPart:
    text: str


@dataclass(frozen=True)
class AudioPart:
    data: bytes
    mime_type: str = "audio/wav"

    @property
    def format(self) -> str:
        _, _, subtype = self.mime_type.partition("/")
        return subtype or self.mime_type


ContentPart = Union[TextPart, AudioPart]


@dataclass(frozen=True)
class Turn:
    """One role-tagged message; ``content`` is plain text or a tuple of parts."""

    role: Role
    content: Union[str, tuple[ContentPart, ...]]

    def __post_init__(self) -> None:
        if isinstance(self.content, list):
            object.__setattr__(self, "content", tuple(self.content))

    @classmethod
    def user(cls, text: str, audio: Optional[AudioPart] = None) -> "Turn":
        if audio is None:
            return cls(Role.USER, text)
        return cls(Role.USER, (TextPart(text), audio))

    @classmethod
    def assistant(cls, text: str) -> "Turn":
        return cls(Role.ASSISTANT, text)

    @property
    def is_multimodal(self) -> bool:
        return not isinstance(self.content, str)

    @property
    def text(self) -> str:
        if isinstance(self.content, str):
            return self.content
        return " ".join(part.text for part in self.content if isinstance(part, TextPart))

    @property
    def audio_parts(self) -> tuple[AudioPart, ...]:
        if isinstance(self.content, str):
            return ()
        return tuple(part for part in self.content if isinstance(part, AudioPart))


class ConversationHistory:
    """
    Append-only (until cleared) log of turns for one session.

    Not safe for concurrent writers; only the orchestrator mutates it, one turn
    at a time.
    """

    def __init__(self) -> None:
        self._turns: list[Turn] = []

    def append(self, turn: Turn) -> None:
        self._turns.append(turn)

    def clear(self) -> None:
        self._turns.clear()

    def snapshot(self) -> tuple[Turn, ...]:
        return tuple(self._turns)

    def last(self) -> Optional[Turn]:
        return self._turns[-1] if self._turns else None

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[Turn]:
        return iter(self.snapshot())


__all__ = ["AudioPart", "ContentPart", "ConversationHistory", "Role", "TextPart", "Turn"]
