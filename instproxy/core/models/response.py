from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping


class Signal(Enum):
    """The aspect of a message a caller reacts to first."""
    ERROR = "error"
    PROGRESS = "progress"
    COMPLETE = "complete"
    LIST = "list"
    NONE = "none"


@dataclass(frozen=True)
class ErrorReport:
    """An ``Error``/``ErrorDescription`` pair reported by the device."""
    code: str
    description: str | None = None


@dataclass(frozen=True)
class ResponseMessage:
    """
    Parsed form of one status message.

    Every part is optional and independent of the others: the final
    Browse message usually carries both ``list_chunk`` and
    ``complete``, and an install message may carry progress together
    with a status. Nothing here decides which part matters; that is
    left to the operation consuming the message.
    """
    list_chunk: list[Any] | None = None
    """
    Entries of ``CurrentList``, in the order the device sent them
    """

    error: ErrorReport | None = None
    """
    Device reported failure; authoritative and terminal when present
    """

    percent_complete: int | None = None
    """
    Raw ``PercentComplete`` value, 0 to 100
    """

    complete: bool = False
    """
    True when ``Status`` is "Complete"
    """

    status: str | None = None
    """
    Raw ``Status`` value, e.g. "CreatingStagingDirectory"
    """

    raw: Mapping[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def terminal(self) -> bool:
        return self.error is not None or self.complete

    def primary_signal(self) -> Signal:
        """
        Return the single aspect to act on when only one is handled per
        message: error, then progress, then completion, then list data.
        """
        if self.error is not None:
            return Signal.ERROR
        if self.percent_complete is not None:
            return Signal.PROGRESS
        if self.complete:
            return Signal.COMPLETE
        if self.list_chunk is not None:
            return Signal.LIST
        return Signal.NONE
