"""Completion and transcription backends consumed by the turn orchestrator."""

from __future__ import annotations

from typing import Optional, Protocol, Sequence

from openai import AsyncOpenAI

from voice_chat.cli.logging_utils import ASSISTANT_LOG_LABEL, LOGGER
from voice_chat.config import (
    OPENAI_API_KEY,
    OPENAI_CHAT_MODEL,
    OPENAI_TIMEOUT_SECONDS,
    OPENAI_TRANSCRIPTION_MODEL,
)

from .history import Turn
from .models import CompletionMessage, ExecutionSettings
from .payloads import build_chat_request, parse_chat_completion


class CompletionBackend(Protocol):
    async def complete(
        self, history: Sequence[Turn], settings: ExecutionSettings
    ) -> CompletionMessage: ...


class TranscriptionBackend(Protocol):
    async def transcribe(self, wav_bytes: bytes, *, language: str) -> str: ...


def build_openai_client() -> AsyncOpenAI:
    return AsyncOpenAI(api_key=OPENAI_API_KEY, timeout=OPENAI_TIMEOUT_SECONDS)


class OpenAIChatBackend:
    """Thin wrapper around the Chat Completions API with optional audio output."""

    def __init__(self, *, client: Optional[AsyncOpenAI] = None, model: str = OPENAI_CHAT_MODEL):
        self._client = client or build_openai_client()
        self._model = model

    @property
    def model_name(self) -> str:
        return self._model

    async def complete(
        self, history: Sequence[Turn], settings: ExecutionSettings
    ) -> CompletionMessage:
        request = build_chat_request(self._model, history, settings)
        LOGGER.verbose(
            ASSISTANT_LOG_LABEL,
            f"Sending {len(history)} turn(s) to {self._model} "
            f"(audio={'yes' if settings.wants_audio else 'no'})",
        )
        response = await self._client.chat.completions.create(**request)
        audio_format = settings.audio.format if settings.audio else None
        return parse_chat_completion(response, audio_format)


class OpenAITranscriber:
    """Speech-to-text via the audio transcription endpoint."""

    def __init__(
        self,
        *,
        client: Optional[AsyncOpenAI] = None,
        model: str = OPENAI_TRANSCRIPTION_MODEL,
    ):
        self._client = client or build_openai_client()
        self._model = model

    async def transcribe(self, wav_bytes: bytes, *, language: str) -> str:
        result = await self._client.audio.transcriptions.create(
            model=self._model,
            file=("speech.wav", wav_bytes, "audio/wav"),
            language=language,
        )
        return (getattr(result, "text", "") or "").strip()


__all__ = [
    "CompletionBackend",
    "OpenAIChatBackend",
    "OpenAITranscriber",
    "TranscriptionBackend",
    "build_openai_client",
]
