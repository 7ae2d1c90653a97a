"""Progress reporting parsed from the inference engine's stderr."""

import re
import logging
from typing import Optional

from .publisher import TranscriptionPublisher

logger = logging.getLogger(__name__)

# e.g. "whisper_print_progress_callback: progress =  40%"
PROGRESS_PATTERN = re.compile(r"^\s*\w+: progress =\s*(\d+)%")


def parse_progress(line: str) -> Optional[int]:
    """Return the percentage from a progress line, or None for any other line."""
    match = PROGRESS_PATTERN.match(line)
    if not match:
        return None
    return max(0, min(100, int(match.group(1))))


class ProgressIndicator:
    """Current transcription progress in percent."""

    def __init__(self, publisher: Optional[TranscriptionPublisher] = None):
        self.publisher = publisher
        self.percent = 0

    def update(self, percent: int) -> None:
        if percent == self.percent:
            return
        self.percent = percent
        if self.publisher:
            self.publisher.publish_progress(percent)

    def reset(self) -> None:
        self.update(0)

    def feed(self, line: str) -> None:
        """Line filter for the engine's stderr."""
        percent = parse_progress(line)
        if percent is not None:
            self.update(percent)
        else:
            logger.debug(f"[engine] {line}")
