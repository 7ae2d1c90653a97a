"""Transcription publisher module for pub/sub event publishing."""

import logging
from pathlib import Path
from typing import Optional
from pubsub import pub

logger = logging.getLogger(__name__)

PROGRESS_TOPIC = "transcription.progress"
TEXT_TOPIC = "transcription.text"


class TranscriptionPublisher:
    """Publishes transcription progress and results using pubsub.pub."""

    def __init__(self, progress_topic: str = PROGRESS_TOPIC, text_topic: str = TEXT_TOPIC):
        """Initialize transcription publisher.

        Args:
            progress_topic: Pub/sub topic name for progress percentages
            text_topic: Pub/sub topic name for delivered text
        """
        self.progress_topic = progress_topic
        self.text_topic = text_topic
        logger.debug(f"TranscriptionPublisher initialized with topics: {progress_topic}, {text_topic}")

    def publish_progress(self, percent: int) -> None:
        pub.sendMessage(self.progress_topic, percent=percent)

    def publish_text(self, text: str, path: Optional[Path] = None) -> None:
        """Publish delivered text.

        Args:
            text: Final transcription text
            path: Where the text was written, None when inserted into a document
        """
        pub.sendMessage(self.text_topic, text=text, path=path)
        logger.debug(f"Published transcription: {len(text)} characters")
