"""Per-session state shared by the console loop and the orchestrator."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from voice_chat.cli.logging_utils import HISTORY_LOG_LABEL, LOGGER, log_state_transition
from voice_chat.config import (
    ASSISTANT_AUDIO_FORMAT,
    ASSISTANT_LANGUAGE,
    ASSISTANT_MAX_TOKENS,
    ASSISTANT_SYSTEM_PROMPT,
    ASSISTANT_TEMPERATURE,
    ASSISTANT_TOP_P,
    ASSISTANT_VOICE,
)
from voice_chat.core.state import SessionState

from .history import ConversationHistory
from .models import AudioOutputOptions, ExecutionSettings


@dataclass(frozen=True)
class ChatSettings:
    temperature: float = ASSISTANT_TEMPERATURE
    top_p: float = ASSISTANT_TOP_P
    max_tokens: int = ASSISTANT_MAX_TOKENS
    system_instruction: str = ASSISTANT_SYSTEM_PROMPT
    voice: str = ASSISTANT_VOICE
    audio_format: str = ASSISTANT_AUDIO_FORMAT
    language: str = ASSISTANT_LANGUAGE

    def with_overrides(self, **overrides) -> "ChatSettings":
        return replace(self, **overrides)

    def execution_settings(self, want_audio_response: bool) -> ExecutionSettings:
        audio = (
            AudioOutputOptions(voice=self.voice, format=self.audio_format)
            if want_audio_response
            else None
        )
        return ExecutionSettings(
            temperature=self.temperature,
            top_p=self.top_p,
            max_tokens=self.max_tokens,
            system_instruction=self.system_instruction,
            audio=audio,
        )


@dataclass
class Session:
    """
    Everything one conversation needs, built once and passed by reference.

    ``audio_input_available`` is decided by a single device probe at startup;
    when it is False the session stays in text-only mode.
    """

    history: ConversationHistory = field(default_factory=ConversationHistory)
    settings: ChatSettings = field(default_factory=ChatSettings)
    audio_input_available: bool = False
    use_audio: bool = False
    state: SessionState = SessionState.IDLE

    def transition(self, new_state: SessionState, reason: str) -> None:
        log_state_transition(self.state, new_state, reason)
        self.state = new_state

    def clear_history(self) -> None:
        cleared = len(self.history)
        self.history.clear()
        LOGGER.verbose(HISTORY_LOG_LABEL, f"Cleared {cleared} turn(s)")
        self.transition(SessionState.IDLE, "history cleared")


__all__ = ["ChatSettings", "Session"]
