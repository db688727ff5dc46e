import logging
import time
from typing import Any, Sequence

from instproxy.core.errors import InstallationError, UnsupportedOperation
from instproxy.core.interpreter import interpret
from instproxy.core.models.command import ClientOptions, Command
from instproxy.core.models.job import InstallationJob
from instproxy.core.ports.channel import CommandChannel
from instproxy.core.ports.progress import ProgressCallback
from instproxy.core.ports.source import DirectoryPackager, LocalSource
from instproxy.core.ports.transfer import FileTransferChannel

DEFAULT_STAGING_PATH = "/sberinstaller.ipa"


class InstallationProxyClient:
    """
    Client for the device's installation proxy service.

    The client issues Browse, Install, Upgrade and Uninstall commands
    over a CommandChannel and follows the stream of status messages the
    device answers with until the operation terminates.

    Install and upgrade first stage the archive on the device through a
    FileTransferChannel, then ask the service to install it from the
    staging path. Their progress callback sees the transfer as the
    first half (0..50) and the device's own progress as the second half
    (50..100). Uninstall reports the device's progress unscaled.

    Termination differs per operation. Browse returns whatever entries
    it collected when the stream ends early, while install, upgrade
    and uninstall raise InstallationError in that situation.

    Without a transfer channel the client can still browse and
    uninstall; install and upgrade raise UnsupportedOperation before
    touching the device.

    An instance drives its channels for one operation at a time and
    callers must serialize calls. The staging path is a single fixed
    location, so concurrent installs against the same device overwrite
    each other's archive.
    """
    def __init__(
        self,
        channel: CommandChannel,
        transfer: FileTransferChannel | None,
        source: LocalSource,
        packager: DirectoryPackager | None = None,
        staging_path: str = DEFAULT_STAGING_PATH,
    ) -> None:
        self._channel = channel
        self._transfer = transfer
        self._source = source
        self._packager = packager
        self._staging_path = staging_path
        self._logger = logging.getLogger("core.proxy")

    @property
    def staging_path(self) -> str:
        return self._staging_path

    async def browse(
        self,
        options: ClientOptions | None = None,
        attributes: Sequence[Any] | None = None,
    ) -> list[Any]:
        """
        List installed applications.

        Entries are returned in arrival order, including those carried by
        the final "Complete" message. If the channel ends before that
        message, the entries received so far are returned as-is.
        """
        command = Command(
            name="Browse",
            client_options=options or {},
            return_attributes=attributes,
        )
        await self._channel.send(command.to_dict())

        result: list[Any] = []
        while True:
            raw = await self._channel.receive_or_none()
            if raw is None:
                self._logger.info(
                    f"Browse stream ended before completion, "
                    f"returning {len(result)} entries"
                )
                break

            message = interpret(raw)
            if message.error is not None:
                raise InstallationError(
                    message.error.code,
                    message.error.description,
                    context={"command": command.name},
                )

            if message.list_chunk:
                result.extend(message.list_chunk)

            if message.complete:
                break

        return result

    async def install(
        self,
        path: str,
        options: ClientOptions | None = None,
        progress: ProgressCallback | None = None,
    ) -> None:
        """Install the archive (or application directory) at ``path``."""
        await self._install_from_local(path, "Install", options, progress)

    async def upgrade(
        self,
        path: str,
        options: ClientOptions | None = None,
        progress: ProgressCallback | None = None,
    ) -> None:
        """Upgrade an installed application from the archive at ``path``."""
        await self._install_from_local(path, "Upgrade", options, progress)

    async def uninstall(
        self,
        bundle_identifier: str,
        options: ClientOptions | None = None,
        progress: ProgressCallback | None = None,
    ) -> None:
        """
        Remove the application identified by ``bundle_identifier``.

        Uninstall is expected to finish within the channel's default
        deadline, so the timeout is left untouched.
        """
        command = Command(
            name="Uninstall",
            client_options=options or {},
            application_identifier=bundle_identifier,
        )
        await self._channel.send(command.to_dict())

        job = InstallationJob.awaiting(command.name, progress)
        await self._follow(job)

    async def _install_from_local(
        self,
        path: str,
        command_name: str,
        options: ClientOptions | None,
        progress: ProgressCallback | None,
    ) -> None:
        if self._transfer is None:
            raise UnsupportedOperation(
                f"Cannot {command_name.lower()} '{path}': "
                "no file transfer channel is configured",
                context={"path": path},
            )

        job = InstallationJob(command=command_name, progress=progress)

        started = time.perf_counter()
        payload = await self._resolve(path)
        self._logger.info(f"Archive read in {self._elapsed_ms(started)}ms")

        started = time.perf_counter()
        await self._transfer.set_file_contents(
            self._staging_path, payload, job.on_transfer
        )
        self._logger.info(
            f"Archive transferred to {self._staging_path} "
            f"in {self._elapsed_ms(started)}ms"
        )

        command = Command(
            name=command_name,
            client_options=options or {},
            package_path=self._staging_path,
        )
        started = time.perf_counter()
        await self._channel.send(command.to_dict())
        self._logger.info(f"{command_name} command sent in {self._elapsed_ms(started)}ms")

        started = time.perf_counter()
        await self._watch_completion(job)
        self._logger.info(f"Watched completion in {self._elapsed_ms(started)}ms")

    async def _resolve(self, path: str) -> bytes:
        if self._source.is_directory(path):
            if self._packager is None:
                raise UnsupportedOperation(
                    f"Cannot install from directory '{path}': "
                    "no directory packager is configured",
                    context={"path": path},
                )
            return await self._packager.pack(path)

        return await self._source.read(path)

    async def _watch_completion(self, job: InstallationJob) -> None:
        job.start_watch()
        self._channel.extend_timeout()
        try:
            await self._follow(job)
        finally:
            self._channel.reset_timeout()

    async def _follow(self, job: InstallationJob) -> None:
        while True:
            raw = await self._channel.receive_or_none()
            if raw is None:
                job.fail()
                raise InstallationError(context={"command": job.command})

            message = interpret(raw)
            if message.error is not None:
                job.fail()
                raise InstallationError(
                    message.error.code,
                    message.error.description,
                    context={"command": job.command},
                )

            if message.percent_complete is not None:
                job.on_device(message.percent_complete)
                self._logger.info(
                    f"{job.command} {message.percent_complete}% Complete"
                )

            if message.complete:
                job.succeed()
                return

    @staticmethod
    def _elapsed_ms(started: float) -> int:
        return int((time.perf_counter() - started) * 1000)
