"""
Output channel protocol and factory.

Defines the interface that all output channels must implement,
enabling easy extension with new output destinations.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from app.config import Settings


@runtime_checkable
class OutputChannel(Protocol):
    """
    Protocol for output channels.

    Example:
        >>> channel = get_channel("console", settings)
        >>> channel.send("Landmarks - Alpine Loop", "km 8  Pass   Example Pass")
    """

    @property
    def name(self) -> str:
        """
        Channel identifier.

        Returns:
            Short name like "console", "none"
        """
        ...

    def send(self, subject: str, body: str) -> None:
        """
        Send a message through this channel.

        Args:
            subject: Message subject/title
            body: Message content

        Raises:
            OutputError: If sending fails
        """
        ...


class OutputError(Exception):
    """Base exception for output channel errors."""

    def __init__(self, channel: str, message: str) -> None:
        self.channel = channel
        super().__init__(f"[{channel}] {message}")


def get_channel(name: str, settings: "Settings") -> OutputChannel:
    """
    Factory function to create output channel instances.

    Args:
        name: Channel identifier (e.g., "console", "none")
        settings: Application settings for channel configuration

    Returns:
        OutputChannel instance

    Raises:
        ValueError: If channel is not known
    """
    # Import here to avoid circular imports
    from outputs.console import ConsoleOutput

    if name == "console":
        return ConsoleOutput(raw=settings.output_format == "json")
    elif name == "none":
        return NullOutput()
    else:
        raise ValueError(f"Unknown output channel: {name}")


class NullOutput:
    """Null output channel that discards all messages."""

    @property
    def name(self) -> str:
        return "none"

    def send(self, subject: str, body: str) -> None:
        pass  # Intentionally do nothing
