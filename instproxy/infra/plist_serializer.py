import plistlib
from typing import Any
from xml.parsers.expat import ExpatError

from instproxy.core.ports.serializer import Serializer


class PlistSerializer(Serializer):
    """
    Property list implementation of the Serializer interface.

    Messages are written as XML property lists, the format the
    installation proxy service expects. Both XML and binary payloads
    are accepted on receive.
    """
    def __init__(self, fmt: plistlib.PlistFormat = plistlib.FMT_XML) -> None:
        self._fmt = fmt

    def serialize(self, message: Any) -> bytes:
        return plistlib.dumps(message, fmt=self._fmt, sort_keys=False)

    def deserialize(self, data: bytes) -> Any:
        try:
            return plistlib.loads(data)
        except (plistlib.InvalidFileException, ExpatError) as ex:
            raise ValueError(f"Invalid property list: {ex}") from ex
