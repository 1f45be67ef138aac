"""Send a trigger to the shell and wait for its answer.

One capture at most may be outstanding per shell session. The wait is
cooperative: the event loop stays free, the completion event is polled in
short slices so that cancellation and the deadline are noticed quickly. Every
exit path leaves capture mode and empties the shell's line editor.
"""

from __future__ import annotations

import asyncio
import contextlib
from typing import TYPE_CHECKING

from .constants import DEFAULT_POLL_INTERVAL, DEFAULT_TIMEOUT
from .logging_setup import get_logger
from .models import CaptureBusyError

if TYPE_CHECKING:
    import logging

    from .channel import ShellChannel

__all__ = ["CaptureDispatcher"]


class CaptureDispatcher:
    """Runs capture round trips on a single shell channel."""

    def __init__(
        self,
        channel: ShellChannel,
        timeout: float = DEFAULT_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        log: logging.Logger | None = None,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            channel: the shell to talk to
            timeout: seconds before giving up on an answer
            poll_interval: seconds between two cancellation checks
            log: logger to use
        """
        self.channel = channel
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.log = log or get_logger("capture")
        self._active = False
        self._cancel: asyncio.Event | None = None
        self._idle = asyncio.Event()
        self._idle.set()

    @property
    def capturing(self) -> bool:
        """Tell if a capture is outstanding."""
        return self._active

    async def dispatch(
        self,
        trigger: str,
        finished: str,
        discard: str = "",
        cancel: asyncio.Event | None = None,
    ) -> str | None:
        """Send `trigger` and return everything the shell printed back.

        Args:
            trigger: keys to send
            finished: regex recognizing the end of the answer (the prompt)
            discard: keys emptying the line editor afterwards
            cancel: set it to give up early

        Returns:
            The raw capture, or None if the capture was cancelled, timed out
            or the shell went away

        Raises:
            CaptureBusyError: if a capture is already in progress
        """
        if self._active or self.channel.capturing:
            raise CaptureBusyError("a capture is already in progress")

        self._active = True
        self._idle.clear()
        self._cancel = cancel or asyncio.Event()
        completed = False
        try:
            try:
                await self.channel.start_capture(trigger, finished)
            except OSError as e:
                self.log.warning("Unable to send the completion request: %s", e)
            else:
                completed = await self._wait_done(self._cancel)
        finally:
            captured = self.channel.stop_capture()
            if not completed:
                self.log.debug("capture torn down, %d chars discarded", len(captured))
            try:
                if discard and self.channel.is_alive:
                    with contextlib.suppress(OSError):
                        await self.channel.write(discard)
            finally:
                self._active = False
                self._cancel = None
                self._idle.set()
        return captured if completed else None

    async def abort(self) -> bool:
        """Cancel the outstanding capture, if any, and wait for its cleanup.

        Must be awaited before anything else is sent to the shell.

        Returns:
            True if a capture was cancelled
        """
        if not self._active:
            return False
        if self._cancel is not None:
            self._cancel.set()
        await self._idle.wait()
        return True

    async def _wait_done(self, cancel: asyncio.Event) -> bool:
        """Poll for the end of the capture.

        Returns:
            True if the shell answered, False on cancellation, timeout or exit
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout
        done = self.channel.capture_done
        while True:
            if done.is_set():
                return True
            if cancel.is_set():
                self.log.debug("capture cancelled")
                return False
            if not self.channel.is_alive:
                self.log.warning("%s exited during the capture", self.channel.program)
                return False
            remaining = deadline - loop.time()
            if remaining <= 0:
                self.log.info("no answer from %s after %.1fs", self.channel.program, self.timeout)
                return False
            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(done.wait(), timeout=min(self.poll_interval, remaining))
