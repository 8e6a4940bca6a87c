"""Session event publisher for pub/sub notification of the presentation layer."""

import logging

from pubsub import pub

from ..models.session import SessionEvent

logger = logging.getLogger(__name__)


class EventPublisher:
    """Publishes session events using pubsub.pub."""

    def __init__(self, topic: str = "session.events"):
        """Initialize event publisher.

        Args:
            topic: Pub/sub topic name for session events
        """
        self.topic = topic
        logger.info(f"EventPublisher initialized with topic: {topic}")

    def publish(self, event: SessionEvent) -> None:
        """Publish a session event to the pub/sub topic.

        Args:
            event: SessionEvent to publish
        """
        logger.debug(f"Publishing {event.event_type} on {self.topic}")
        pub.sendMessage(self.topic, event=event)
