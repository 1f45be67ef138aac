"""What the completion core needs from the terminal hosting the shell."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    import asyncio

__all__ = ["ShellChannel"]


@runtime_checkable
class ShellChannel(Protocol):
    """A running interactive shell which output can be redirected.

    While capturing, everything the shell prints goes to a single scratch
    buffer, and `capture_done` is set once the output looks complete.
    """

    capture_done: asyncio.Event

    @property
    def program(self) -> str:
        """Executable name or path of the shell."""

    @property
    def is_alive(self) -> bool:
        """Tell if the shell process is still running."""

    @property
    def capturing(self) -> bool:
        """Tell if a capture is in progress."""

    @property
    def captured(self) -> str:
        """Text received since the capture started."""

    async def start_capture(self, data: str, finished: str) -> None:
        """Reset the scratch buffer, start capturing and write `data`.

        Args:
            data: keys sent to the shell
            finished: regex matching the last line once the shell is done
        """

    def stop_capture(self) -> str:
        """Leave capture mode and return what was captured."""

    async def write(self, data: str) -> None:
        """Send `data` to the shell, outside of any capture."""
