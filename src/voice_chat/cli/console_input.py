"""Line reader shared by console prompts and the manual recording stop."""

from __future__ import annotations

import asyncio
import sys
import threading
from typing import Optional, TextIO


class ConsoleInput:
    """
    Reads stdin on one background thread and hands lines to the event loop.

    A single reader means a line typed to stop a recording is never swallowed
    by a stale prompt, and a cancelled wait leaves the next line queued.
    """

    def __init__(self, stream: Optional[TextIO] = None, output: Optional[TextIO] = None):
        self._stream = stream or sys.stdin
        self._output = output or sys.stdout
        self._queue: asyncio.Queue[Optional[str]] = asyncio.Queue()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self._thread is not None:
            return
        self._loop = asyncio.get_running_loop()
        self._thread = threading.Thread(
            target=self._read_forever, name="console-input", daemon=True
        )
        self._thread.start()

    async def read_line(self, prompt: str = "") -> str:
        """Wait for the next line; raises EOFError once stdin is closed."""

        self.start()
        if prompt:
            self._output.write(prompt)
            self._output.flush()
        line = await self._queue.get()
        if line is None:
            self._queue.put_nowait(None)
            raise EOFError("console input closed")
        return line

    async def wait_for_enter(self) -> None:
        await self.read_line()

    def _read_forever(self) -> None:
        while True:
            raw = self._stream.readline()
            line = raw.rstrip("\r\n") if raw else None
            if not self._deliver(line) or line is None:
                return

    def _deliver(self, line: Optional[str]) -> bool:
        loop = self._loop
        if loop is None or loop.is_closed():
            return False
        try:
            loop.call_soon_threadsafe(self._queue.put_nowait, line)
        except RuntimeError:
            return False
        return True


__all__ = ["ConsoleInput"]
