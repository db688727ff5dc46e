import argparse
import asyncio
import logging
import os
import sys
from typing import Any, Callable, Sequence, TextIO

from instproxy.bootstrap.config.loader import CONFIG_ENV
from instproxy.bootstrap.config.settings import InstProxyConfig
from instproxy.core.errors import InstProxyError
from instproxy.core.helpers.utils import parse_option, setup_logging
from instctl.core.dispatcher import CommandDispatcher
from instctl.core.ports.render import Renderer

ClientFactory = Callable[[InstProxyConfig], Any]
"""
Returns an async context manager yielding an InstallationProxyClient.
"""


class ProgressPrinter:
    """Writes one progress line per distinct percentage."""

    def __init__(self, stream: TextIO, label: str = "") -> None:
        self._stream = stream
        self._label = label
        self._last: int | None = None

    def __call__(self, percent: int) -> None:
        if percent == self._last:
            return
        self._last = percent
        self._stream.write(f"{self._label}: {percent}%\n")
        self._stream.flush()


class InstCtl:
    """
    Command line front end for the installation proxy client.

    Each invocation runs exactly one command: the configuration is
    loaded, a client is opened, the registered handler runs and its
    result is rendered to stdout. Progress goes to stderr.
    """
    def __init__(
        self,
        renderers: dict[str, Renderer],
        config_factory: Callable[[], InstProxyConfig],
        client_factory: ClientFactory,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
    ) -> None:
        self._renderers = renderers
        self._config_factory = config_factory
        self._client_factory = client_factory
        self._stdout = stdout or sys.stdout
        self._stderr = stderr or sys.stderr
        self._dispatcher = CommandDispatcher()
        self._logger = logging.getLogger("instctl.ctl")

    def command(self, name: str):
        return self._dispatcher.command(name)

    def run(self, argv: Sequence[str] | None = None) -> int:
        args = self._argparse().parse_args(argv)

        if args.config:
            os.environ[CONFIG_ENV] = args.config
        setup_logging(args.log_level)

        config = self._config_factory()
        try:
            result = asyncio.run(self.execute(config, args))
        except (InstProxyError, TimeoutError, OSError) as ex:
            self._logger.debug(f"{args.namespace} failed", exc_info=ex)
            message = str(ex) or type(ex).__name__
            self._stderr.write(f"{args.namespace} failed: {message}\n")
            return 1

        if result is not None:
            self._stdout.write(self._renderers[args.output].render(result))
            self._stdout.write("\n")
        return 0

    async def execute(self, config: InstProxyConfig, args: argparse.Namespace) -> Any:
        progress = ProgressPrinter(self._stderr, label=args.namespace)
        async with self._client_factory(config) as client:
            return await self._dispatcher.dispatch(
                args.namespace,
                client=client,
                namespace=args,
                progress=progress,
            )

    def _argparse(self) -> argparse.ArgumentParser:
        global_opts = argparse.ArgumentParser(
            prog="instctl",
            description="Browse, install, upgrade and uninstall applications on a device.",
        )
        global_opts.add_argument("-c", "--config", help="Path to an instproxy configuration file")
        global_opts.add_argument(
            "-l", "--log-level",
            default="WARNING",
            choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        )
        global_opts.add_argument(
            "-o", "--output",
            default="yaml",
            choices=sorted(self._renderers),
        )

        sub = global_opts.add_subparsers(dest="namespace", required=True)

        browse = sub.add_parser("browse", help="List installed applications")
        browse.add_argument(
            "-a", "--attr",
            dest="attributes",
            action="append",
            help="Attribute to return for each application (repeatable)",
        )

        install = sub.add_parser("install", help="Install an archive or application directory")
        install.add_argument("path")

        upgrade = sub.add_parser("upgrade", help="Upgrade an installed application")
        upgrade.add_argument("path")

        uninstall = sub.add_parser("uninstall", help="Remove an application")
        uninstall.add_argument("bundle_id")

        for parser in (browse, install, upgrade, uninstall):
            parser.add_argument(
                "--option",
                dest="options",
                action="append",
                type=self._option,
                default=[],
                metavar="KEY=VALUE",
                help="Client option forwarded to the device (repeatable)",
            )

        return global_opts

    @staticmethod
    def _option(raw: str) -> tuple[str, object]:
        try:
            return parse_option(raw)
        except ValueError as ex:
            raise argparse.ArgumentTypeError(str(ex))
