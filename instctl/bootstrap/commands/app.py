import argparse
from typing import Any

from instctl.bootstrap.deps import get_cli
from instproxy.core.ports.progress import ProgressCallback
from instproxy.core.proxy import InstallationProxyClient

cli = get_cli()


@cli.command("browse")
async def browse(
    client: InstallationProxyClient,
    namespace: argparse.Namespace,
    _: ProgressCallback,
) -> list[Any]:
    return await client.browse(
        options=dict(namespace.options),
        attributes=namespace.attributes,
    )


@cli.command("install")
async def install(
    client: InstallationProxyClient,
    namespace: argparse.Namespace,
    progress: ProgressCallback,
) -> dict[str, Any]:
    await client.install(namespace.path, options=dict(namespace.options), progress=progress)
    return {"command": "Install", "path": namespace.path, "status": "Complete"}


@cli.command("upgrade")
async def upgrade(
    client: InstallationProxyClient,
    namespace: argparse.Namespace,
    progress: ProgressCallback,
) -> dict[str, Any]:
    await client.upgrade(namespace.path, options=dict(namespace.options), progress=progress)
    return {"command": "Upgrade", "path": namespace.path, "status": "Complete"}


@cli.command("uninstall")
async def uninstall(
    client: InstallationProxyClient,
    namespace: argparse.Namespace,
    progress: ProgressCallback,
) -> dict[str, Any]:
    await client.uninstall(namespace.bundle_id, options=dict(namespace.options), progress=progress)
    return {"command": "Uninstall", "bundle_id": namespace.bundle_id, "status": "Complete"}
