"""Shared result, error and state types."""

from .exceptions import DeviceUnavailableError
from .results import Err, ErrorKind, Ok, Result, TurnError
from .state import SessionState

__all__ = [
    "DeviceUnavailableError",
    "Err",
    "ErrorKind",
    "Ok",
    "Result",
    "SessionState",
    "TurnError",
]
