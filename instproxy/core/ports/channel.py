from typing import Any, Mapping, Protocol


class CommandChannel(Protocol):
    """
    Session scoped structured-message channel to the installation
    proxy service.

    The channel owns framing, encoding and the receive deadline. Its
    deadline is either a short default, suited to a single round trip,
    or a long value switched on for operations that keep the device
    busy. A client drives one channel with at most one operation at a
    time.
    """

    async def send(self, command: Mapping[str, Any]) -> None:
        """
        Encode and send one message.

        Raises ChannelError when the transport fails.
        """

    async def receive_or_none(self) -> Mapping[str, Any] | None:
        """
        Wait for the next message within the current deadline.

        Returns None when the peer ended the stream cleanly. Raises
        TimeoutError when the deadline is exceeded and ChannelError on
        transport failure.
        """

    def extend_timeout(self) -> None:
        """Switch the receive deadline to the long value."""

    def reset_timeout(self) -> None:
        """Restore the default receive deadline."""
