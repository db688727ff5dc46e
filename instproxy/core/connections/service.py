import asyncio
import logging
import ssl
import struct
from typing import Any, Mapping

from instproxy.core.errors import ChannelError, ProtocolError
from instproxy.core.ports.serializer import Serializer


class ServiceConnection:
    """
    TCP connection to an installation proxy service endpoint,
    implementing the CommandChannel interface.

    Frames are a 4-byte big-endian length prefix followed by the
    serialized payload. Messages are read on demand by the operation
    driving the connection; there is no background receive loop, so
    messages are handled strictly in delivery order and at most one is
    in flight.

    Every receive is bounded by the current deadline. The deadline is
    the default timeout unless ``extend_timeout()`` switched it to the
    extended timeout for a long-running operation.

    The end of the stream is reported as None only when the peer closes
    at a frame boundary. A connection that breaks inside a frame is a
    ChannelError.

    A receive that times out or is cancelled closes the connection, as
    the stream position inside the interrupted frame is unknown. Later
    sends and receives raise ChannelError.
    """
    def __init__(
        self,
        host: str,
        port: int,
        serializer: Serializer,
        ssl_context: ssl.SSLContext | None = None,
        default_timeout: float = 10.0,
        extended_timeout: float = 300.0,
        max_message_size: int = 16 * 1024 * 1024,
    ) -> None:
        self._host = host
        self._port = port
        self._serializer = serializer
        self._ssl_context = ssl_context
        self._default_timeout = default_timeout
        self._extended_timeout = extended_timeout
        self._max_message_size = max_message_size

        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None
        self._timeout = default_timeout

        self._logger = logging.getLogger("core.connections.service")

    @property
    def address(self) -> str:
        return f"{self._host}:{self._port}"

    @property
    def timeout(self) -> float:
        """Deadline currently applied to each receive, in seconds."""
        return self._timeout

    @property
    def connected(self) -> bool:
        return self._writer is not None

    async def __aenter__(self) -> "ServiceConnection":
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def connect(self) -> None:
        if self.connected:
            return

        try:
            self._reader, self._writer = await asyncio.wait_for(
                asyncio.open_connection(
                    host=self._host,
                    port=self._port,
                    ssl=self._ssl_context,
                ),
                timeout=self._default_timeout,
            )
        except OSError as ex:
            raise ChannelError(
                f"Unable to connect to {self.address}: {ex}",
                context={"address": self.address},
            ) from ex

        self._logger.debug(f"Connected to {self.address}")

    async def close(self) -> None:
        """
        Close the underlying stream. Safe to call multiple times.
        """
        writer = self._writer
        self._reader = None
        self._writer = None
        if writer is None:
            return

        writer.close()
        try:
            await writer.wait_closed()
        except (OSError, ssl.SSLError) as ex:
            self._logger.debug(f"Ignoring error while closing {self.address}: {ex}")

    def extend_timeout(self) -> None:
        self._timeout = self._extended_timeout
        self._logger.debug(f"Receive timeout extended to {self._timeout}s")

    def reset_timeout(self) -> None:
        self._timeout = self._default_timeout
        self._logger.debug(f"Receive timeout reset to {self._timeout}s")

    async def send(self, command: Mapping[str, Any]) -> None:
        if self._writer is None:
            raise ChannelError(
                f"Connection to {self.address} is not open",
                context={"address": self.address},
            )

        payload = self._serializer.serialize(dict(command))
        frame = struct.pack("!I", len(payload)) + payload

        try:
            self._writer.write(frame)
            await self._writer.drain()
        except (ConnectionError, OSError) as ex:
            self._logger.error(f"Send to {self.address} failed: {ex}")
            await self.close()
            raise ChannelError(
                f"Send to {self.address} failed: {ex}",
                context={"address": self.address},
            ) from ex

    async def receive_or_none(self) -> Mapping[str, Any] | None:
        if self._reader is None:
            raise ChannelError(
                f"Connection to {self.address} is not open",
                context={"address": self.address},
            )

        try:
            return await asyncio.wait_for(self._read_frame(), timeout=self._timeout)
        except (TimeoutError, asyncio.CancelledError):
            # A frame may be half read; the stream cannot be resynchronised.
            await self.close()
            raise

    async def _read_frame(self) -> Mapping[str, Any] | None:
        try:
            header = await self._reader.readexactly(4)
        except asyncio.IncompleteReadError as ex:
            if not ex.partial:
                self._logger.info(f"Peer {self.address} closed the stream")
                return None
            raise ChannelError(
                f"Truncated frame header from {self.address}",
                context={"address": self.address},
            ) from ex
        except (ConnectionError, OSError) as ex:
            raise ChannelError(
                f"Receive from {self.address} failed: {ex}",
                context={"address": self.address},
            ) from ex

        length = struct.unpack("!I", header)[0]
        if length > self._max_message_size:
            raise ProtocolError(
                f"Frame of {length} bytes exceeds limit of {self._max_message_size}",
                context={"address": self.address, "length": length},
            )

        try:
            payload = await self._reader.readexactly(length)
        except asyncio.IncompleteReadError as ex:
            raise ChannelError(
                f"Truncated frame from {self.address}: "
                f"{len(ex.partial)} of {length} bytes",
                context={"address": self.address},
            ) from ex
        except (ConnectionError, OSError) as ex:
            raise ChannelError(
                f"Receive from {self.address} failed: {ex}",
                context={"address": self.address},
            ) from ex

        try:
            data = self._serializer.deserialize(payload)
        except ValueError as ex:
            raise ProtocolError(
                f"Undecodable message from {self.address}: {ex}",
                context={"address": self.address},
            ) from ex

        if not isinstance(data, Mapping):
            raise ProtocolError(
                f"Expected a mapping from {self.address}, "
                f"received {type(data).__name__}",
                context={"address": self.address},
            )

        return data
