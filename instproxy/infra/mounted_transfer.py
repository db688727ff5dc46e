import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import BinaryIO

from instproxy.core.errors import ChannelError
from instproxy.core.ports.progress import ProgressCallback
from instproxy.core.ports.transfer import FileTransferChannel


class MountedFileTransfer(FileTransferChannel):
    """
    FileTransferChannel writing into a locally mounted view of the
    device's media filesystem (for instance an AFC FUSE mount).

    Remote paths are interpreted relative to ``mount_point``; the
    leading "/" of a device path maps to the mount root and paths
    escaping the mount are rejected. The payload is written in
    ``chunk_size`` pieces, each write running in a worker thread, and
    progress is reported after every chunk as an integer 0..100.
    """
    def __init__(self, mount_point: Path, chunk_size: int = 1024 * 1024) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")

        self._mount_point = Path(mount_point)
        self._chunk_size = chunk_size
        self._pool = ThreadPoolExecutor(max_workers=1)
        self._logger = logging.getLogger("infra.transfer")

    def resolve(self, remote_path: str) -> Path:
        root = self._mount_point.resolve()
        target = (root / remote_path.lstrip("/")).resolve()
        if target != root and root not in target.parents:
            raise ChannelError(
                f"Remote path '{remote_path}' escapes mount point {root}",
                context={"remote_path": remote_path},
            )
        return target

    async def set_file_contents(
        self,
        remote_path: str,
        data: bytes,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        target = self.resolve(remote_path)
        loop = asyncio.get_running_loop()
        total = len(data)

        try:
            handle = await loop.run_in_executor(self._pool, target.open, "wb")
        except OSError as ex:
            raise ChannelError(
                f"Unable to open {remote_path} for writing: {ex}",
                context={"remote_path": remote_path},
            ) from ex

        try:
            offset = 0
            while offset < total:
                chunk = data[offset:offset + self._chunk_size]
                await loop.run_in_executor(self._pool, self._write, handle, chunk)
                offset += len(chunk)
                if on_progress is not None:
                    on_progress(offset * 100 // total)
        except OSError as ex:
            raise ChannelError(
                f"Write to {remote_path} failed at offset {offset}: {ex}",
                context={"remote_path": remote_path, "offset": offset},
            ) from ex
        finally:
            await loop.run_in_executor(self._pool, handle.close)

        if total == 0 and on_progress is not None:
            on_progress(100)

        self._logger.debug(f"Wrote {total} bytes to {remote_path}")

    def close(self) -> None:
        self._pool.shutdown(wait=False)

    @staticmethod
    def _write(handle: BinaryIO, chunk: bytes) -> None:
        handle.write(chunk)
