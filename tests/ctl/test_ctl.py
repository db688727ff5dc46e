import contextlib
import io

import pytest
import yaml

from instctl.bootstrap.commands import app
from instctl.core.ctl import InstCtl, ProgressPrinter
from instctl.infra.format_renderer import JsonRenderer, YamlRenderer
from instproxy.core.proxy import InstallationProxyClient
from tests.fake.fake_channel import FakeChannel
from tests.fake.fake_local import FakeSource, FakeTransfer


def make_ctl(channel, source=None):
    stdout, stderr = io.StringIO(), io.StringIO()

    @contextlib.asynccontextmanager
    async def open_client(_):
        yield InstallationProxyClient(
            channel=channel,
            transfer=FakeTransfer(steps=[100]),
            source=source or FakeSource(files={"app.ipa": b"IPA"}),
        )

    ctl = InstCtl(
        renderers={"yaml": YamlRenderer(), "json": JsonRenderer()},
        config_factory=lambda: None,
        client_factory=open_client,
        stdout=stdout,
        stderr=stderr,
    )
    for name in ("browse", "install", "upgrade", "uninstall"):
        ctl.command(name)(getattr(app, name))
    return ctl, stdout, stderr


@pytest.mark.ut
def test_browse_renders_yaml():
    channel = FakeChannel([
        {"CurrentList": [{"CFBundleIdentifier": "a"}], "Status": "Complete"},
    ])
    ctl, stdout, _ = make_ctl(channel)

    code = ctl.run(["browse", "-a", "CFBundleIdentifier", "--option", "ApplicationType=User"])

    assert code == 0
    assert yaml.safe_load(stdout.getvalue()) == [{"CFBundleIdentifier": "a"}]
    assert channel.sent[0]["ClientOptions"] == {
        "ApplicationType": "User",
        "ReturnAttributes": ["CFBundleIdentifier"],
    }


@pytest.mark.ut
def test_install_prints_progress_to_stderr():
    channel = FakeChannel([{"PercentComplete": 50}, {"Status": "Complete"}])
    ctl, stdout, stderr = make_ctl(channel)

    code = ctl.run(["-o", "json", "install", "app.ipa"])

    assert code == 0
    assert stderr.getvalue().splitlines() == ["install: 50%", "install: 75%"]
    assert '"status": "Complete"' in stdout.getvalue()


@pytest.mark.ut
def test_uninstall_failure_exits_non_zero():
    channel = FakeChannel([{"Error": "E1", "ErrorDescription": "bad"}])
    ctl, stdout, stderr = make_ctl(channel)

    code = ctl.run(["uninstall", "com.example.app"])

    assert code == 1
    assert stdout.getvalue() == ""
    assert stderr.getvalue() == "uninstall failed: E1: bad\n"


@pytest.mark.ut
def test_invalid_option_is_rejected_by_parser():
    ctl, _, _ = make_ctl(FakeChannel())

    with pytest.raises(SystemExit):
        ctl.run(["browse", "--option", "novalue"])


@pytest.mark.ut
def test_progress_printer_skips_repeats():
    stream = io.StringIO()
    printer = ProgressPrinter(stream, label="upgrade")

    for value in (10, 10, 20):
        printer(value)

    assert stream.getvalue() == "upgrade: 10%\nupgrade: 20%\n"


@pytest.mark.ut
def test_missing_local_archive_reports_one_line_failure():
    channel = FakeChannel([{"Status": "Complete"}])
    ctl, stdout, stderr = make_ctl(channel, source=FakeSource())

    code = ctl.run(["install", "missing.ipa"])

    assert code == 1
    assert stdout.getvalue() == ""
    assert stderr.getvalue().startswith("install failed: ")
    assert "missing.ipa" in stderr.getvalue()
    assert len(stderr.getvalue().splitlines()) == 1
    assert channel.sent == []
