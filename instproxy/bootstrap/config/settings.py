import ssl
from pathlib import Path
from typing import Annotated, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict, PydanticBaseSettingsSource, YamlConfigSettingsSource

from instproxy.bootstrap.config.loader import get_configfile
from instproxy.core.proxy import DEFAULT_STAGING_PATH


class TLSSettings(BaseModel):
    certfile: Annotated[
        Path,
        Field(
            description=(
                "Path to the host certificate (PEM) presented to the device.\n"
                "This is the certificate recorded in the device's pairing record.\n"
            ),
        )
    ]

    keyfile: Annotated[
        Path,
        Field(description="Path to the private key (PEM) matching certfile.")
    ]

    cafile: Annotated[
        Path | None,
        Field(
            description=(
                "Optional CA certificate (PEM) used to verify the device.\n"
                "Without it the device certificate is not verified.\n"
            ),
            default=None
        )
    ]

    @field_validator("certfile", "keyfile", "cafile")
    @classmethod
    def validate_path(cls, v: Path | None) -> Path | None:
        if v is not None and not v.exists():
            raise ValueError(f"Path {v} does not exist.")
        return v


class DeviceSettings(BaseModel):
    host: Annotated[
        str,
        Field(
            description="Host exposing the installation proxy service.",
            default="127.0.0.1"
        )
    ]

    port: Annotated[
        int,
        Field(
            description=(
                "TCP port of the installation proxy service, typically a\n"
                "locally forwarded port of an already started session."
            ),
            gt=0,
            lt=65536
        )
    ]

    tls: Annotated[
        TLSSettings | None,
        Field(
            description="TLS material for sessions that require SSL.",
            default=None
        )
    ]


class ProxySettings(BaseModel):
    staging_path: Annotated[
        str,
        Field(
            description=(
                "Remote path archives are written to before an install or\n"
                "upgrade command references them. It is shared by every\n"
                "operation and every client talking to the same device."
            ),
            default=DEFAULT_STAGING_PATH
        )
    ]

    default_timeout: Annotated[
        float,
        Field(
            description="Receive deadline for ordinary request/response exchanges (seconds).",
            default=10.0,
            gt=0
        )
    ]

    extended_timeout: Annotated[
        float,
        Field(
            description="Receive deadline while waiting for install/upgrade completion (seconds).",
            default=300.0,
            gt=0
        )
    ]

    max_message_size: Annotated[
        int,
        Field(
            description="Maximum allowed size for a single received frame.",
            default=16 * 1024 * 1024,
            gt=0
        )
    ]

    codec: Annotated[
        Literal["plist", "msgpack"],
        Field(
            description="Message encoding used on the command channel.",
            default="plist"
        )
    ]


class TransferSettings(BaseModel):
    mount_point: Annotated[
        Path | None,
        Field(
            description=(
                "Local directory where the device's media filesystem is mounted.\n"
                "Required for install and upgrade; archives are staged through it."
            ),
            default=None
        )
    ]

    chunk_size: Annotated[
        int,
        Field(
            description="Size of each write while staging an archive.",
            default=1024 * 1024,
            gt=0
        )
    ]


class PackagerSettings(BaseModel):
    enabled: Annotated[
        bool,
        Field(
            description=(
                "Allow installing from an application directory by packing it\n"
                "into an archive first. Directory inputs are rejected otherwise."
            ),
            default=False
        )
    ]


class InstProxyConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="INSTPROXY_",
        env_nested_delimiter="__",
        extra="allow"
    )

    device: Annotated[
        DeviceSettings,
        Field(description="Where and how to reach the installation proxy service.")
    ]

    proxy: Annotated[
        ProxySettings,
        Field(
            description="Client behavior: staging path, timeouts and encoding.",
            default_factory=ProxySettings
        )
    ]

    transfer: Annotated[
        TransferSettings,
        Field(
            description="Archive staging configuration.",
            default_factory=TransferSettings
        )
    ]

    packager: Annotated[
        PackagerSettings,
        Field(
            description="Directory packaging capability.",
            default_factory=PackagerSettings
        )
    ]

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=get_configfile()),
        )

    def get_client_ssl_ctx(self) -> ssl.SSLContext | None:
        tls = self.device.tls
        if tls is None:
            return None

        ctx = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)
        ctx.load_cert_chain(certfile=tls.certfile, keyfile=tls.keyfile)
        # Device certificates are not issued for a hostname.
        ctx.check_hostname = False
        if tls.cafile is None:
            ctx.verify_mode = ssl.CERT_NONE
        else:
            ctx.verify_mode = ssl.CERT_REQUIRED
            ctx.load_verify_locations(cafile=tls.cafile)

        return ctx
