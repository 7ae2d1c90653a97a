"""Session event publishing over pypubsub."""

import logging
from pubsub import pub

logger = logging.getLogger(__name__)

STATUS_TOPIC = "session.status"
ERROR_TOPIC = "session.error"

STATUS_IDLE = "idle"
STATUS_INSTALLING = "installing"
STATUS_RECORDING = "recording"
STATUS_TRANSCRIBING = "transcribing"


class SessionPublisher:
    """Publishes session status changes and asynchronous errors."""

    def __init__(self, status_topic: str = STATUS_TOPIC, error_topic: str = ERROR_TOPIC):
        """Initialize session publisher.

        Args:
            status_topic: Topic for status strings
            error_topic: Topic for exceptions raised inside process callbacks
        """
        self.status_topic = status_topic
        self.error_topic = error_topic
        self.status = STATUS_IDLE

    def publish_status(self, status: str) -> None:
        """Publish a status change. Repeated statuses are not re-sent."""
        if status == self.status:
            return
        self.status = status
        logger.debug(f"Session status: {status}")
        pub.sendMessage(self.status_topic, status=status)

    def publish_error(self, error: Exception) -> None:
        """Log an asynchronous failure and publish it."""
        logger.error(f"Session error: {error}")
        pub.sendMessage(self.error_topic, error=error)
