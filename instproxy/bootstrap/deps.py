import contextlib
import json
from functools import lru_cache
from typing import AsyncIterator

from pydantic import ValidationError

from instproxy.bootstrap.config.settings import InstProxyConfig
from instproxy.core.connections.service import ServiceConnection
from instproxy.core.ports.serializer import Serializer
from instproxy.core.proxy import InstallationProxyClient
from instproxy.infra.local_source import FileSystemSource
from instproxy.infra.mounted_transfer import MountedFileTransfer
from instproxy.infra.msgpack_serializer import MsgPackSerializer
from instproxy.infra.plist_serializer import PlistSerializer
from instproxy.infra.zip_packager import ZipDirectoryPackager


@lru_cache
def get_config() -> InstProxyConfig:
    try:
        return InstProxyConfig()  # type: ignore[call-arg]
    except FileNotFoundError as ex:
        raise SystemExit(f"Provide a correct configuration file path: {ex}")
    except ValidationError as ex:
        msg = ["Configuration validation failed:"]
        errs = json.loads(ex.json())
        for err in errs:
            msg.append(f"  {'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}")
        raise SystemExit("\n".join(msg))


def get_serializer(config: InstProxyConfig) -> Serializer:
    if config.proxy.codec == "msgpack":
        return MsgPackSerializer()
    return PlistSerializer()


@contextlib.asynccontextmanager
async def open_client(config: InstProxyConfig) -> AsyncIterator[InstallationProxyClient]:
    """
    Connect to the configured service and yield a ready client.

    The connection and the worker pools of the local collaborators are
    released when the block exits.
    """
    connection = ServiceConnection(
        host=config.device.host,
        port=config.device.port,
        serializer=get_serializer(config),
        ssl_context=config.get_client_ssl_ctx(),
        default_timeout=config.proxy.default_timeout,
        extended_timeout=config.proxy.extended_timeout,
        max_message_size=config.proxy.max_message_size,
    )
    source = FileSystemSource()

    transfer = None
    if config.transfer.mount_point is not None:
        transfer = MountedFileTransfer(
            mount_point=config.transfer.mount_point,
            chunk_size=config.transfer.chunk_size,
        )

    packager = ZipDirectoryPackager() if config.packager.enabled else None

    try:
        async with connection:
            yield InstallationProxyClient(
                channel=connection,
                transfer=transfer,
                source=source,
                packager=packager,
                staging_path=config.proxy.staging_path,
            )
    finally:
        source.close()
        if transfer is not None:
            transfer.close()
        if packager is not None:
            packager.close()
