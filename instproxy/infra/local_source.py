import asyncio
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from instproxy.core.ports.source import LocalSource


class FileSystemSource(LocalSource):
    """
    Reads install inputs from the local filesystem. File reads run in a
    small thread pool so large archives do not block the event loop.
    """
    def __init__(self, max_workers: int = 1) -> None:
        self._pool = ThreadPoolExecutor(max_workers=max_workers)

    def is_directory(self, path: str) -> bool:
        return Path(path).is_dir()

    async def read(self, path: str) -> bytes:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._pool, Path(path).read_bytes)

    def close(self) -> None:
        self._pool.shutdown(wait=False)
