from typing import Any, Mapping

from instproxy.core.errors import ProtocolError
from instproxy.core.models.response import ErrorReport, ResponseMessage

STATUS_COMPLETE = "Complete"


def interpret(raw: Mapping[str, Any]) -> ResponseMessage:
    """
    Parse one status message into its independent parts.

    Each recognised key is read on its own; a message carrying
    ``CurrentList`` together with ``Status: Complete`` yields both a
    list chunk and a completion flag. Unknown keys are ignored and kept
    in ``raw``.
    """
    if not isinstance(raw, Mapping):
        raise ProtocolError(
            f"Expected a mapping, received {type(raw).__name__}",
            context={"message": raw},
        )

    list_chunk = None
    if "CurrentList" in raw:
        list_chunk = list(raw["CurrentList"] or [])

    error = None
    if "Error" in raw:
        description = raw.get("ErrorDescription")
        error = ErrorReport(
            code=str(raw["Error"]),
            description=None if description is None else str(description),
        )

    percent = None
    if "PercentComplete" in raw:
        try:
            percent = int(raw["PercentComplete"])
        except (TypeError, ValueError) as ex:
            raise ProtocolError(
                f"Invalid PercentComplete: {raw['PercentComplete']!r}",
                context={"message": raw},
            ) from ex

    status = raw.get("Status")

    return ResponseMessage(
        list_chunk=list_chunk,
        error=error,
        percent_complete=percent,
        complete=status == STATUS_COMPLETE,
        status=status,
        raw=raw,
    )
