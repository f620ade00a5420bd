"""Per-session turn pipeline states."""

from __future__ import annotations

from enum import Enum


class SessionState(str, Enum):
    IDLE = "idle"
    AWAITING_INPUT = "awaiting_input"
    RECORDING = "recording"
    TYPING = "typing"
    TRANSCRIBING = "transcribing"
    COMPOSING = "composing"
    AWAITING_BACKEND = "awaiting_backend"
    RESPONDING = "responding"


__all__ = ["SessionState"]
