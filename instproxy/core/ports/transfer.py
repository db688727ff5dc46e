from typing import Protocol

from instproxy.core.ports.progress import ProgressCallback


class FileTransferChannel(Protocol):
    """
    Pushes a payload to a path on the device filesystem.
    """

    async def set_file_contents(
        self,
        remote_path: str,
        data: bytes,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        """
        Write ``data`` to ``remote_path``, replacing any existing file.

        ``on_progress`` receives the transfer's own 0..100 completion.
        """
