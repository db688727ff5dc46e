"""
Errors raised by the installation proxy client.

Transport timeouts are not wrapped: a receive that exceeds its deadline
raises the builtin ``TimeoutError`` unchanged.
"""
from typing import Any


class InstProxyError(Exception):
    """Base exception for installation proxy operations."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}


class ChannelError(InstProxyError):
    """The command channel failed to send or receive a message."""


class ProtocolError(ChannelError):
    """A received frame could not be turned into a message mapping."""


class UnsupportedOperation(InstProxyError):
    """The requested input cannot be handled by this client configuration."""


class InstallationError(InstProxyError):
    """
    The device reported a failure, or the operation's status stream
    ended before reaching completion.

    ``code`` and ``description`` are only set when the device sent an
    ``Error`` entry. A stream that simply stopped carries neither.
    """

    INCOMPLETE = "Installation or command did not complete successfully."

    def __init__(
        self,
        code: str | None = None,
        description: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        if code is None:
            message = self.INCOMPLETE
        elif description:
            message = f"{code}: {description}"
        else:
            message = code

        super().__init__(message, context)
        self.code = code
        self.description = description
