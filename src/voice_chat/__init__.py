"""Voice/text chat client built around a single-turn conversation pipeline."""

from . import audio, chat, cli, config, core

__all__ = ["audio", "chat", "cli", "config", "core"]
