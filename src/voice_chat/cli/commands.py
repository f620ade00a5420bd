"""Console command tokens recognized between turns."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ConsoleCommand(str, Enum):
    EXIT = "exit"
    CLEAR = "clear"


_COMMAND_TOKENS = {
    "exit": ConsoleCommand.EXIT,
    "quit": ConsoleCommand.EXIT,
    "clear": ConsoleCommand.CLEAR,
}


def parse_command(text: str) -> Optional[ConsoleCommand]:
    """Return the command for ``text`` (case-insensitive), or None for a normal message."""

    return _COMMAND_TOKENS.get((text or "").strip().lower())


__all__ = ["ConsoleCommand", "parse_command"]
