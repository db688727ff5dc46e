import argparse
import functools
from typing import Any, Awaitable, Protocol

from instproxy.core.ports.progress import ProgressCallback
from instproxy.core.proxy import InstallationProxyClient


class CommandHandler(Protocol):
    def __call__(
        self,
        client: InstallationProxyClient,
        namespace: argparse.Namespace,
        progress: ProgressCallback,
    ) -> Awaitable[Any]:
        ...


class CommandDispatcher:
    def __init__(self) -> None:
        self._commands: dict[str, CommandHandler] = {}

    async def dispatch(
        self,
        name: str,
        *,
        client: InstallationProxyClient,
        namespace: argparse.Namespace,
        progress: ProgressCallback,
    ) -> Any:
        command = self._commands.get(name)
        if command is None:
            raise RuntimeError(f"Unknown '{name}' Command")
        return await command(client, namespace, progress)

    def command(self, name: str):
        def decorator(func: CommandHandler):

            @functools.wraps(func)
            async def wrapper(
                client: InstallationProxyClient,
                namespace: argparse.Namespace,
                progress: ProgressCallback,
            ) -> Any:
                return await func(client, namespace, progress)

            self._commands[name] = wrapper

            return wrapper

        return decorator
