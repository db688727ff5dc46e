from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence


ClientOptions = Mapping[str, Any]
"""
Caller supplied key/value pairs forwarded verbatim in ``ClientOptions``.
"""


@dataclass
class Command:
    """
    A single request sent to the installation proxy service.

    Commands are built fresh for every call and never reused. The
    caller's option mapping is copied when the wire form is produced,
    so adding ``ReturnAttributes`` never leaks back into it.
    """
    name: str
    """
    Service command, e.g. "Browse", "Install", "Upgrade", "Uninstall"
    """

    client_options: ClientOptions = field(default_factory=dict)
    """
    Opaque options forwarded to the device
    """

    return_attributes: Sequence[Any] | None = None
    """
    Attributes requested for each browsed application
    """

    package_path: str | None = None
    """
    Remote path of the staged archive (install and upgrade)
    """

    application_identifier: str | None = None
    """
    Bundle identifier targeted by an uninstall
    """

    def to_dict(self) -> dict[str, Any]:
        """Return the wire mapping of the command."""
        options = dict(self.client_options)
        if self.return_attributes is not None:
            options["ReturnAttributes"] = list(self.return_attributes)

        data: dict[str, Any] = {"Command": self.name}
        if self.application_identifier is not None:
            data["ApplicationIdentifier"] = self.application_identifier
        data["ClientOptions"] = options
        if self.package_path is not None:
            data["PackagePath"] = self.package_path

        return data
