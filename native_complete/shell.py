"""Interactive shell running in a pseudo-terminal.

PtyShell:
    Spawns the shell attached to a pty, feeds everything it prints into an
    output buffer and, in capture mode, into a private scratch buffer.
    Lifecycle follows the usual graceful sequence (SIGTERM -> wait -> SIGKILL).
"""

__all__ = ["PtyShell", "set_terminal_size"]

import asyncio
import codecs
import contextlib
import fcntl
import os
import pty
import re
import struct
import termios
from collections.abc import Awaitable, Callable

from .ansi import strip_ansi
from .constants import DEFAULT_TERM
from .logging_setup import get_logger

PreSubmitHook = Callable[[], Awaitable[object]]

# Output kept for prompt detection outside of captures
MAX_OUTPUT_TAIL = 4096


def set_terminal_size(descriptor: int, rows: int, cols: int) -> None:
    """Set the terminal size.

    Args:
        descriptor: File descriptor of the terminal
        rows: Number of rows
        cols: Number of columns
    """
    fcntl.ioctl(descriptor, termios.TIOCSWINSZ, struct.pack("HHHH", rows, cols, 0, 0))


def _last_line_matches(pattern: re.Pattern[str], text: str) -> bool:
    """Tell if the last line of `text` contains `pattern`."""
    clean = strip_ansi(text).replace("\r\n", "\n").rsplit("\r", 1)[-1]
    if "\n" not in clean:
        return False
    return pattern.search(clean.rsplit("\n", 1)[-1]) is not None


class PtyShell:  # pylint: disable=too-many-instance-attributes
    """An interactive shell driven through a pseudo-terminal.

    Usage:
        shell = PtyShell("/bin/bash")
        await shell.start()
        await shell.wait_prompt(r"[$#%>] ")
        await shell.submit("cd /tmp\\n")
        await shell.stop()

    Capture mode is single-slot: `start_capture` resets the scratch buffer,
    the capture is complete once the last line shows the prompt again, or
    once the shell has been quiet for `idle_timeout` seconds.
    """

    def __init__(  # noqa: PLR0913
        self,
        program: str | None = None,
        args: tuple[str, ...] = ("-i",),
        term: str = DEFAULT_TERM,
        env: dict[str, str] | None = None,
        cwd: str | None = None,
        rows: int = 24,
        cols: int = 200,
        idle_timeout: float = 0.5,
        graceful_timeout: float = 1.0,
    ) -> None:
        self._program = program or os.environ.get("SHELL", "/bin/sh")
        self._args = args
        self._env = {**os.environ, "TERM": term, **(env or {})}
        self._cwd = cwd
        self._size = (rows, cols)
        self._idle_timeout = idle_timeout
        self._graceful_timeout = graceful_timeout
        self.log = get_logger("shell")

        self._proc: asyncio.subprocess.Process | None = None
        self._fd: int | None = None
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._output = ""
        self._output_event = asyncio.Event()
        self._eof = asyncio.Event()

        self._capturing = False
        self._scratch: list[str] = []
        self._finished: re.Pattern[str] | None = None
        self._idle_handle: asyncio.TimerHandle | None = None
        self.capture_done = asyncio.Event()

        self._pre_submit_hooks: list[PreSubmitHook] = []

    @property
    def program(self) -> str:
        """Executable of the shell."""
        return self._program

    @property
    def pid(self) -> int | None:
        """Return PID if process exists, else None."""
        return self._proc.pid if self._proc else None

    @property
    def is_alive(self) -> bool:
        """Check if the shell is currently running."""
        return self._proc is not None and self._proc.returncode is None and not self._eof.is_set()

    @property
    def capturing(self) -> bool:
        """Tell if output is being redirected to the scratch buffer."""
        return self._capturing

    @property
    def captured(self) -> str:
        """Text received since the capture started."""
        return "".join(self._scratch)

    @property
    def output(self) -> str:
        """Tail of everything the shell printed outside of captures."""
        return self._output

    async def start(self) -> None:
        """Spawn the shell. Stops the existing one first if running."""
        if self.is_alive:
            await self.stop()

        master, slave = pty.openpty()
        set_terminal_size(master, *self._size)
        try:
            self._proc = await asyncio.create_subprocess_exec(
                self._program,
                *self._args,
                stdin=slave,
                stdout=slave,
                stderr=slave,
                env=self._env,
                cwd=self._cwd,
                start_new_session=True,
            )
        except OSError:
            os.close(master)
            raise
        finally:
            os.close(slave)

        self._fd = master
        self._eof.clear()
        self._output = ""
        asyncio.get_running_loop().add_reader(master, self._on_readable)
        self.log.debug("started %s (pid %s)", self._program, self._proc.pid)

    async def stop(self) -> int | None:
        """Stop the shell gracefully.

        Returns:
            The process return code, or None if not running
        """
        self.stop_capture()
        self._close_fd()
        if self._proc is None:
            return None
        if self._proc.returncode is not None:
            return self._proc.returncode

        with contextlib.suppress(ProcessLookupError):
            self._proc.terminate()
        try:
            await asyncio.wait_for(self._proc.wait(), timeout=self._graceful_timeout)
        except TimeoutError:
            with contextlib.suppress(ProcessLookupError):
                self._proc.kill()
            await self._proc.wait()
        return self._proc.returncode

    def add_pre_submit_hook(self, hook: PreSubmitHook) -> None:
        """Register a coroutine function awaited before any `submit`."""
        self._pre_submit_hooks.append(hook)

    async def submit(self, text: str) -> None:
        """Send user input, once every pre-submit hook has run."""
        for hook in self._pre_submit_hooks:
            await hook()
        await self.write(text)

    async def write(self, data: str) -> None:
        """Write `data` to the shell's terminal.

        Raises:
            OSError: if the shell is gone
        """
        if self._fd is None:
            raise OSError("shell is not running")
        os.write(self._fd, data.encode("utf-8"))

    async def wait_prompt(self, pattern: str, timeout: float = 5.0) -> bool:
        """Wait until the output ends with `pattern`.

        Returns:
            False if the prompt didn't show up in time
        """
        prompt_re = re.compile(f"(?:{pattern})\\Z")
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while True:
            self._output_event.clear()
            if prompt_re.search(strip_ansi(self._output)):
                return True
            remaining = deadline - loop.time()
            if remaining <= 0 or not self.is_alive:
                return False
            try:
                await asyncio.wait_for(self._output_event.wait(), timeout=remaining)
            except TimeoutError:
                return False

    async def start_capture(self, data: str, finished: str) -> None:
        """Reset the scratch buffer, redirect the output and send `data`."""
        self._scratch.clear()
        self.capture_done.clear()
        self._finished = re.compile(finished)
        self._capturing = True
        self._arm_idle_timer()
        await self.write(data)

    def stop_capture(self) -> str:
        """Leave capture mode and return the scratch buffer content."""
        self._capturing = False
        self._finished = None
        if self._idle_handle is not None:
            self._idle_handle.cancel()
            self._idle_handle = None
        return self.captured

    def _arm_idle_timer(self) -> None:
        if self._idle_handle is not None:
            self._idle_handle.cancel()
        self._idle_handle = asyncio.get_running_loop().call_later(self._idle_timeout, self._on_idle)

    def _on_idle(self) -> None:
        self._idle_handle = None
        if self._capturing and self._scratch:
            self.log.debug("capture considered complete after %.2fs of silence", self._idle_timeout)
            self.capture_done.set()

    def _on_readable(self) -> None:
        """Drain the pty, dispatching the text to the right buffer."""
        assert self._fd is not None
        try:
            data = os.read(self._fd, 4096)
        except OSError:  # EIO once the child side is closed
            data = b""
        if not data:
            self.log.debug("end of output from %s", self._program)
            self._close_fd()
            self._eof.set()
            self._output_event.set()
            return

        text = self._decoder.decode(data)
        if self._capturing:
            self._scratch.append(text)
            self._arm_idle_timer()
            if self._finished is not None and _last_line_matches(self._finished, self.captured):
                self.capture_done.set()
        else:
            self._output = (self._output + text)[-MAX_OUTPUT_TAIL:]
        self._output_event.set()

    def _close_fd(self) -> None:
        if self._fd is None:
            return
        with contextlib.suppress(ValueError, RuntimeError):
            asyncio.get_running_loop().remove_reader(self._fd)
        with contextlib.suppress(OSError):
            os.close(self._fd)
        self._fd = None
