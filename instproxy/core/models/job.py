import logging
from dataclasses import dataclass
from enum import Enum

from instproxy.core.ports.progress import ProgressCallback

logger = logging.getLogger("core.models.job")


class JobPhase(Enum):
    TRANSFERRING = "transferring"
    AWAITING_COMPLETION = "awaiting-completion"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class InstallationJob:
    """
    Bookkeeping for one install, upgrade or uninstall call.

    A job lives for exactly one client call and is discarded when the
    call returns or raises. It folds the two progress sources into a
    single signal: while transferring, the transfer's 0..100 maps to
    0..50, and while awaiting completion the device's 0..100 maps to
    50..100. Jobs created with ``split=False`` (uninstall) pass the
    device value through unscaled.
    """
    command: str
    progress: ProgressCallback | None = None
    split: bool = True
    phase: JobPhase = JobPhase.TRANSFERRING
    last_progress: int | None = None

    @classmethod
    def awaiting(cls, command: str, progress: ProgressCallback | None = None) -> "InstallationJob":
        """Create a job that starts directly in the completion watch."""
        return cls(
            command=command,
            progress=progress,
            split=False,
            phase=JobPhase.AWAITING_COMPLETION,
        )

    def on_transfer(self, percent: int) -> None:
        self._report(percent // 2 if self.split else percent)

    def on_device(self, percent: int) -> None:
        self._report(50 + percent // 2 if self.split else percent)

    def start_watch(self) -> None:
        self.phase = JobPhase.AWAITING_COMPLETION

    def succeed(self) -> None:
        self.phase = JobPhase.SUCCEEDED

    def fail(self) -> None:
        self.phase = JobPhase.FAILED

    def _report(self, overall: int) -> None:
        self.last_progress = overall
        if self.progress is not None:
            logger.debug(f"{self.command} progress callback: {overall}")
            self.progress(overall)
