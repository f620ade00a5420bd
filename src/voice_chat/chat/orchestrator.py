"""Turns typed text or recorded speech into one completed assistant turn."""

from __future__ import annotations

from typing import Optional

from voice_chat.audio.capture import AudioBuffer
from voice_chat.cli.logging_utils import (
    ASSISTANT_LOG_LABEL,
    ERROR_LOG_LABEL,
    HISTORY_LOG_LABEL,
    LOGGER,
    TRANSCRIPT_LOG_LABEL,
)
from voice_chat.core.results import Err, ErrorKind, Ok, Result, TurnError
from voice_chat.core.state import SessionState

from .backends import CompletionBackend, TranscriptionBackend
from .history import AudioPart, Turn
from .models import (
    NO_TEXT_RESPONSE,
    AudioPayload,
    ChatResponse,
    CompletionMessage,
    ContentKind,
    ExecutionSettings,
)
from .session import Session

EMPTY_MESSAGE_TEXT = "Please provide a message."
NO_AUDIO_DATA_TEXT = "No audio data provided."
MISSING_AUDIO_TEXT = "No audio provided."
TRANSCRIPTION_EMPTY_TEXT = "Could not transcribe the audio. Please try again or type your message."


def _error_response(kind: ErrorKind, text: str) -> ChatResponse:
    return ChatResponse(text=text, error=TurnError(kind, text))


class TurnOrchestrator:
    """
    Runs one conversational turn at a time against the session's history.

    History only ever gains a user turn once a request is actually about to be
    sent, and an assistant turn once text came back; failures never append.
    Backend and transcription faults are converted into error responses instead
    of propagating to the caller.
    """

    def __init__(
        self,
        session: Session,
        completion_backend: CompletionBackend,
        transcriber: Optional[TranscriptionBackend] = None,
    ):
        self._session = session
        self._backend = completion_backend
        self._transcriber = transcriber

    @property
    def session(self) -> Session:
        return self._session

    async def handle_text(self, message: str, want_audio_response: bool = False) -> ChatResponse:
        """Send a typed message and return the assistant's reply."""

        return await self._complete_turn(message, want_audio_response)

    async def handle_audio(
        self, audio_buffer: AudioBuffer, want_audio_response: bool = True
    ) -> ChatResponse:
        """Transcribe recorded speech, then send it (text plus the raw audio) as one turn."""

        if audio_buffer.is_empty:
            return _error_response(ErrorKind.EMPTY_CAPTURE, NO_AUDIO_DATA_TEXT)

        wav_bytes = audio_buffer.to_wav()
        self._session.transition(SessionState.TRANSCRIBING, "audio captured")
        transcription = await self._transcribe(wav_bytes)
        if isinstance(transcription, Err):
            self._session.transition(SessionState.IDLE, "transcription failed")
            return ChatResponse(text=transcription.error.message, error=transcription.error)

        transcript = transcription.value
        LOGGER.log(TRANSCRIPT_LOG_LABEL, f"Transcribed: {transcript}")
        return await self.handle_transcript(
            transcript, AudioPart(wav_bytes, "audio/wav"), want_audio_response
        )

    async def handle_transcript(
        self,
        transcript: str,
        audio: Optional[AudioPart],
        want_audio_response: bool = True,
    ) -> ChatResponse:
        """
        Send an already transcribed spoken turn.

        The recorded audio travels with the transcript; a spoken reply cannot be
        requested without it.
        """

        return await self._complete_turn(
            transcript, want_audio_response, audio_part=audio, audio_based=True
        )

    async def _complete_turn(
        self,
        message: str,
        want_audio_response: bool,
        *,
        audio_part: Optional[AudioPart] = None,
        audio_based: bool = False,
    ) -> ChatResponse:
        text = (message or "").strip()
        if not text:
            return ChatResponse(text=EMPTY_MESSAGE_TEXT)

        if want_audio_response and audio_based and (audio_part is None or not audio_part.data):
            self._session.transition(SessionState.IDLE, "missing audio input")
            return _error_response(ErrorKind.MISSING_AUDIO_INPUT, MISSING_AUDIO_TEXT)

        self._session.transition(SessionState.COMPOSING, "composing request")
        self._session.history.append(Turn.user(text, audio_part))
        LOGGER.verbose(
            HISTORY_LOG_LABEL,
            f"User turn appended ({'text+audio' if audio_part else 'text'}); "
            f"{len(self._session.history)} turn(s) in history",
        )
        settings = self._session.settings.execution_settings(want_audio_response)

        self._session.transition(SessionState.AWAITING_BACKEND, "request sent")
        completion = await self._call_backend(settings)
        if isinstance(completion, Err):
            self._session.transition(SessionState.IDLE, "backend failure")
            return ChatResponse(text=completion.error.message, error=completion.error)

        self._session.transition(SessionState.RESPONDING, "reply received")
        response = self._build_response(completion.value, want_audio_response)
        self._session.transition(SessionState.IDLE, "turn complete")
        return response

    def _build_response(
        self, completion: CompletionMessage, want_audio_response: bool
    ) -> ChatResponse:
        if completion.text:
            self._session.history.append(Turn.assistant(completion.text))
            LOGGER.verbose(
                HISTORY_LOG_LABEL,
                f"Assistant turn appended; {len(self._session.history)} turn(s) in history",
            )

        audio: Optional[AudioPayload] = None
        if want_audio_response:
            for item in completion.items:
                if item.kind is ContentKind.AUDIO and item.data:
                    audio = AudioPayload(item.data, item.mime_type or "audio/wav")
                    break

        LOGGER.verbose(
            ASSISTANT_LOG_LABEL,
            f"Response received (text={'yes' if completion.text else 'no'}, "
            f"audio={'yes' if audio else 'no'})",
        )
        return ChatResponse(text=completion.text or NO_TEXT_RESPONSE, audio=audio)

    async def _call_backend(self, settings: ExecutionSettings) -> Result[CompletionMessage]:
        try:
            completion = await self._backend.complete(self._session.history.snapshot(), settings)
        except Exception as exc:
            LOGGER.log(ERROR_LOG_LABEL, f"Completion request failed: {exc}", error=True)
            return Err.of(ErrorKind.BACKEND_FAILURE, f"Error: {exc}")
        return Ok(completion)

    async def _transcribe(self, wav_bytes: bytes) -> Result[str]:
        if self._transcriber is None:
            return Err.of(ErrorKind.TRANSCRIPTION_FAILED, "No transcription backend configured.")
        try:
            transcript = await self._transcriber.transcribe(
                wav_bytes, language=self._session.settings.language
            )
        except Exception as exc:
            LOGGER.log(ERROR_LOG_LABEL, f"Transcription failed: {exc}", error=True)
            return Err.of(ErrorKind.TRANSCRIPTION_FAILED, f"Error processing audio: {exc}")
        if not transcript or not transcript.strip():
            return Err.of(ErrorKind.TRANSCRIPTION_FAILED, TRANSCRIPTION_EMPTY_TEXT)
        return Ok(transcript.strip())


__all__ = ["TurnOrchestrator"]
