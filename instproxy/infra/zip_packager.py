import asyncio
import io
import zipfile
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from instproxy.core.ports.source import DirectoryPackager


class ZipDirectoryPackager(DirectoryPackager):
    """
    Packs an application bundle directory into an IPA archive held in
    memory.

    The bundle is placed under ``Payload/<name>.app/``; a directory not
    ending in ".app" gets the suffix appended. Entries are added in
    sorted order so the same tree always produces the same member list.
    """
    def __init__(self, compression: int = zipfile.ZIP_DEFLATED) -> None:
        self._compression = compression
        self._pool = ThreadPoolExecutor(max_workers=1)

    async def pack(self, path: str) -> bytes:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._pool, self.build, Path(path))

    def build(self, directory: Path) -> bytes:
        if not directory.is_dir():
            raise NotADirectoryError(str(directory))

        name = directory.name
        if not name.endswith(".app"):
            name = f"{name}.app"
        prefix = Path("Payload") / name

        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", compression=self._compression) as archive:
            for file in sorted(directory.rglob("*")):
                if file.is_dir():
                    continue
                arcname = prefix / file.relative_to(directory)
                archive.write(file, arcname.as_posix())

        return buffer.getvalue()

    def close(self) -> None:
        self._pool.shutdown(wait=False)
