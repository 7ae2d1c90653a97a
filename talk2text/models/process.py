"""External process data models."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ExitStatus(Enum):
    """How an external process ended."""
    FINISHED = "finished"        # exit code 0
    INTERRUPTED = "interrupted"  # killed by a signal, or stopped after we asked it to
    FAILED = "failed"            # any other nonzero exit code


@dataclass(frozen=True)
class ProcessResult:
    """Outcome of an external process, handed to its exit callback."""
    status: ExitStatus
    returncode: Optional[int]

    @property
    def finished(self) -> bool:
        return self.status is ExitStatus.FINISHED

    @property
    def interrupted(self) -> bool:
        return self.status is ExitStatus.INTERRUPTED


def classify_exit(returncode: int, cancel_requested: bool = False) -> ExitStatus:
    """Map a raw return code to an ExitStatus.

    A negative code means the process was killed by a signal. Programs such as
    ffmpeg catch SIGINT and exit with their own nonzero code, so a nonzero exit
    after we requested cancellation also counts as an interruption.
    """
    if returncode == 0:
        return ExitStatus.FINISHED
    if returncode < 0 or cancel_requested:
        return ExitStatus.INTERRUPTED
    return ExitStatus.FAILED
