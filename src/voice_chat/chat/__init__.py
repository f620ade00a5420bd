"""Conversation history, orchestration and backend adapters."""

from .backends import (
    CompletionBackend,
    OpenAIChatBackend,
    OpenAITranscriber,
    TranscriptionBackend,
)
from .history import AudioPart, ConversationHistory, Role, TextPart, Turn
from .models import (
    AudioOutputOptions,
    AudioPayload,
    ChatResponse,
    CompletionMessage,
    ContentItem,
    ContentKind,
    ExecutionSettings,
)
from .orchestrator import TurnOrchestrator
from .session import ChatSettings, Session

__all__ = [
    "AudioOutputOptions",
    "AudioPart",
    "AudioPayload",
    "ChatResponse",
    "ChatSettings",
    "CompletionBackend",
    "CompletionMessage",
    "ContentItem",
    "ContentKind",
    "ConversationHistory",
    "ExecutionSettings",
    "OpenAIChatBackend",
    "OpenAITranscriber",
    "Role",
    "Session",
    "TextPart",
    "TranscriptionBackend",
    "Turn",
    "TurnOrchestrator",
]
