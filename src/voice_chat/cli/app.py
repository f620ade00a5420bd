"""
Voice/text chat client.
Talks to an OpenAI chat model that can answer with synthesized speech.
"""

import argparse
import asyncio
import sys
from functools import partial
from typing import Optional

from voice_chat.audio import AudioCapture, AudioPlayer
from voice_chat.chat import (
    ChatSettings,
    OpenAIChatBackend,
    OpenAITranscriber,
    Session,
    TurnOrchestrator,
)
from voice_chat.chat.backends import build_openai_client
from voice_chat.cli.console import ChatConsole
from voice_chat.cli.console_input import ConsoleInput
from voice_chat.cli.logging_utils import (
    ERROR_LOG_LABEL,
    LOGGER,
    SYSTEM_LOG_LABEL,
    set_verbose_logging,
)
from voice_chat.config import (
    ASSISTANT_AUDIO_FORMAT,
    ASSISTANT_VOICE,
    AUDIO_FORMAT_CHOICES,
    MAX_RECORD_SECONDS,
    OPENAI_CHAT_MODEL,
    VOICE_CHOICES,
)
from voice_chat.diagnostics import test_audio_capture


def _positive_float(value: str) -> float:
    try:
        parsed = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Expected a number, got '{value}'.") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("Value must be greater than zero.")
    return parsed


def build_orchestrator(
    *,
    model: Optional[str] = None,
    voice: Optional[str] = None,
    audio_format: Optional[str] = None,
) -> TurnOrchestrator:
    """Wire one session, its backends and the orchestrator together."""

    overrides = {}
    if voice:
        overrides["voice"] = voice
    if audio_format:
        overrides["audio_format"] = audio_format
    session = Session(settings=ChatSettings().with_overrides(**overrides))

    client = build_openai_client()
    backend = OpenAIChatBackend(client=client, model=model or OPENAI_CHAT_MODEL)
    transcriber = OpenAITranscriber(client=client)
    return TurnOrchestrator(session, backend, transcriber)


async def run_chat(
    *,
    text_only: bool = False,
    max_record_seconds: float = MAX_RECORD_SECONDS,
    model: Optional[str] = None,
    voice: Optional[str] = None,
    audio_format: Optional[str] = None,
) -> None:
    """Main integration function - runs the interactive chat session."""

    LOGGER.log(SYSTEM_LOG_LABEL, "Starting voice chat")
    orchestrator = build_orchestrator(model=model, voice=voice, audio_format=audio_format)
    console_input = ConsoleInput()
    chat_console = ChatConsole(
        orchestrator,
        console_input,
        capture=None if text_only else AudioCapture(),
        player=None if text_only else AudioPlayer(),
        max_record_seconds=max_record_seconds,
    )

    try:
        await chat_console.choose_audio_mode(allow_audio=not text_only)
        await chat_console.run()
    except EOFError:
        LOGGER.log(SYSTEM_LOG_LABEL, "Input closed; shutting down")


def parse_args(argv: Optional[list[str]] = None):
    """Parse CLI arguments."""

    parser = argparse.ArgumentParser(
        description="Chat with an OpenAI model by voice or text, with spoken replies."
    )
    parser.add_argument(
        "mode",
        nargs="?",
        choices=["run", "test-audio"],
        default="run",
        help="Select an execution mode (default: run)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show detailed diagnostic logs (state changes, history, audio devices).",
    )
    parser.add_argument(
        "--text-only",
        action="store_true",
        help="Skip the microphone check and chat by typing only.",
    )
    parser.add_argument(
        "--max-record-seconds",
        type=_positive_float,
        default=MAX_RECORD_SECONDS,
        help=f"Upper bound for one recording (default: {MAX_RECORD_SECONDS:g}).",
    )
    parser.add_argument(
        "--model",
        help=f"Chat model to use (default: {OPENAI_CHAT_MODEL}).",
    )
    parser.add_argument(
        "--voice",
        choices=VOICE_CHOICES,
        help=f"Voice for spoken replies (default: {ASSISTANT_VOICE}).",
    )
    parser.add_argument(
        "--audio-format",
        choices=AUDIO_FORMAT_CHOICES,
        help=f"Encoding for spoken replies (default: {ASSISTANT_AUDIO_FORMAT}).",
    )
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None):
    """Main entry point"""

    args = parse_args(argv)
    set_verbose_logging(args.verbose)

    if args.mode == "test-audio":
        run_func = partial(test_audio_capture, min(args.max_record_seconds, 5.0))
    else:
        run_func = partial(
            run_chat,
            text_only=args.text_only,
            max_record_seconds=args.max_record_seconds,
            model=args.model,
            voice=args.voice,
            audio_format=args.audio_format,
        )

    try:
        asyncio.run(run_func())
    except KeyboardInterrupt:
        LOGGER.log(SYSTEM_LOG_LABEL, "Shutdown requested")
    except Exception as e:
        LOGGER.log(ERROR_LOG_LABEL, f"CLI error: {e}", error=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
