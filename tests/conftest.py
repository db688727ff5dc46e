import pytest

from instproxy.core.proxy import InstallationProxyClient
from tests.fake.fake_local import FakeSource, FakeTransfer


@pytest.fixture
def source():
    return FakeSource(
        files={"/tmp/app.ipa": b"IPA-BYTES"},
        directories={"/tmp/App.app"},
    )


@pytest.fixture
def transfer():
    return FakeTransfer()


@pytest.fixture
def make_client(source, transfer):
    def factory(channel, packager=None, **kwargs):
        return InstallationProxyClient(
            channel=channel,
            transfer=kwargs.pop("transfer", transfer),
            source=source,
            packager=packager,
            **kwargs,
        )

    return factory
