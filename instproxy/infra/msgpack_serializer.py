import msgpack
from typing import Any

from instproxy.core.ports.serializer import Serializer


class MsgPackSerializer(Serializer):
    """
    MsgPack-based implementation of the Serializer interface, for
    service relays that speak msgpack instead of property lists.

    Malformed payloads surface as msgpack's ValueError subclasses.
    """
    def serialize(self, message: Any) -> bytes:
        return msgpack.packb(message, use_bin_type=True)

    def deserialize(self, data: bytes) -> Any:
        return msgpack.unpackb(data, raw=False)
