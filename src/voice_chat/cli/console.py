"""Interactive console loop that drives the turn pipeline."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional, TextIO

from voice_chat.audio.capture import AudioCapture
from voice_chat.audio.playback import AudioPlayer, write_response_audio
from voice_chat.chat.models import ChatResponse
from voice_chat.chat.orchestrator import TurnOrchestrator
from voice_chat.core.results import Err
from voice_chat.core.state import SessionState

from .commands import ConsoleCommand, parse_command
from .console_input import ConsoleInput
from .logging_utils import AUDIO_LOG_LABEL, LOGGER

BANNER = (
    "\n===== Voice Chat =====\n"
    "Type 'exit' or 'quit' to end the conversation.\n"
    "Type 'clear' to clear the conversation history.\n"
    "======================\n"
)
SEPARATOR = "-----------------------"


class ChatConsole:
    """Line-oriented UI: reads input, runs one turn, prints and plays the reply."""

    def __init__(
        self,
        orchestrator: TurnOrchestrator,
        console: ConsoleInput,
        *,
        capture: Optional[AudioCapture] = None,
        player: Optional[AudioPlayer] = None,
        max_record_seconds: float = 10.0,
        audio_directory: Optional[Path] = None,
        output: Optional[TextIO] = None,
    ):
        self._orchestrator = orchestrator
        self._session = orchestrator.session
        self._console = console
        self._capture = capture
        self._player = player
        self._max_record_seconds = max_record_seconds
        self._audio_directory = audio_directory
        self._output = output or sys.stdout

    async def choose_audio_mode(self, *, allow_audio: bool = True) -> bool:
        """Probe the microphone once and ask whether to talk or type for this session."""

        self._session.use_audio = False
        if not allow_audio or self._capture is None:
            return False

        probe = self._capture.probe()
        if isinstance(probe, Err):
            self._session.audio_input_available = False
            self._print("Audio recording is not available on this system.")
            return False

        self._session.audio_input_available = True
        answer = await self._console.read_line(
            "Would you like to use audio input/output? (y/n)\n"
        )
        self._session.use_audio = answer.strip().lower() == "y"
        return self._session.use_audio

    async def run(self) -> None:
        self._print(BANNER)
        while True:
            self._session.transition(SessionState.AWAITING_INPUT, "ready for input")
            try:
                keep_going = await self.run_turn()
            except EOFError:
                break
            if not keep_going:
                break
        self._session.transition(SessionState.IDLE, "session ended")
        self._print("Thank you for using Voice Chat. Goodbye!")

    async def run_turn(self) -> bool:
        """Handle one round of input; returns False when the user asked to exit."""

        if self._session.use_audio:
            typed = await self._audio_turn()
            if typed is None:
                return True
            return await self._text_turn(typed)

        self._session.transition(SessionState.TYPING, "waiting for typed input")
        message = await self._console.read_line("User > ")
        return await self._text_turn(message)

    async def _audio_turn(self) -> Optional[str]:
        """Record and send one spoken turn; returns typed text when falling back to typing."""

        typed = await self._console.read_line(
            "Press Enter to start recording "
            f"(speak for up to {self._max_record_seconds:g} seconds, "
            "or press Enter again to stop)...\n"
        )
        if typed.strip():
            return typed

        if self._capture is None:
            return await self._console.read_line("Please type your question:\n")
        self._session.transition(SessionState.RECORDING, "recording started")
        self._print("Recording... (press Enter to stop)")
        recorded = await self._capture.record(
            self._max_record_seconds, stop_signal=self._console.wait_for_enter()
        )
        if isinstance(recorded, Err):
            self._session.transition(SessionState.TYPING, "recording failed")
            self._print(f"Error recording audio: {recorded.error.message}")
            return await self._console.read_line("Please type your question instead:\n")

        buffer = recorded.value
        if buffer.is_empty:
            self._session.transition(SessionState.TYPING, "empty recording")
            return await self._console.read_line("No audio recorded. Please type your question:\n")

        self._print("Recording complete. Processing...")
        response = await self._orchestrator.handle_audio(buffer, want_audio_response=True)
        await self._present(response)
        return None

    async def _text_turn(self, message: str) -> bool:
        text = message.strip()
        if not text:
            return True

        command = parse_command(text)
        if command is ConsoleCommand.EXIT:
            return False
        if command is ConsoleCommand.CLEAR:
            self._session.clear_history()
            self._print("Conversation history cleared.")
            return True

        response = await self._orchestrator.handle_text(
            text, want_audio_response=self._session.use_audio
        )
        await self._present(response)
        return True

    async def _present(self, response: ChatResponse) -> None:
        self._print("")
        self._print(f"Assistant > {response.text}")

        audio = response.audio
        wants_playback = self._session.use_audio and self._player is not None
        if wants_playback and audio is not None and audio.data:
            try:
                path = write_response_audio(audio.data, audio.format, self._audio_directory)
            except OSError as exc:
                LOGGER.log(AUDIO_LOG_LABEL, f"Unable to save reply audio: {exc}", error=True)
            else:
                self._print("Playing audio response...")
                playback_error = await self._player.play(path)
                if playback_error is not None:
                    self._print(str(playback_error))

        self._print(SEPARATOR)

    def _print(self, text: str) -> None:
        self._output.write(text + "\n")
        self._output.flush()


__all__ = ["ChatConsole"]
