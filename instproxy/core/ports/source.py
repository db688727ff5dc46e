from typing import Protocol


class LocalSource(Protocol):
    """Resolves install inputs on the local machine."""

    def is_directory(self, path: str) -> bool:
        """Return True when ``path`` names a directory."""

    async def read(self, path: str) -> bytes:
        """Return the full contents of the file at ``path``."""


class DirectoryPackager(Protocol):
    """
    Optional capability turning an application directory into an
    installable archive. Clients without one reject directory inputs.
    """

    async def pack(self, path: str) -> bytes:
        """Return the archive bytes for the directory at ``path``."""
