from typing import Protocol, Any


class Serializer(Protocol):
    """
    Encodes and decodes the structured messages carried by a
    CommandChannel frame.

    Implementations must be:
    - pure (no side effects)
    - able to round trip nested mappings, lists, strings and integers
    - raise ValueError (or a subclass) on malformed input
    """

    def serialize(self, message: Any) -> bytes:
        """Encode a mapping into one frame payload."""

    def deserialize(self, data: bytes) -> Any:
        """Decode one frame payload back into Python objects."""
