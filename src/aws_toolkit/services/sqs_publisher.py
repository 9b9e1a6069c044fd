"""SQS publisher service for fire-and-forget messages."""

import json
import logging

from aws_toolkit.infrastructure.sqs_client import SQSClient
from aws_toolkit.models.errors import QueueError

logger = logging.getLogger(__name__)


class QueuePublisher:
    """Publishes JSON or text messages, logging failures instead of raising."""

    def __init__(self, sqs_client: SQSClient):
        """
        Initialize SQS publisher.

        Args:
            sqs_client: SQS client instance.
        """
        self._sqs_client = sqs_client

    def publish(self, payload: dict | str) -> bool:
        """
        Publish a message to the queue.

        Args:
            payload: Dict (sent as JSON) or raw string body.

        Returns:
            True if publish succeeded, False otherwise.
        """
        body = payload if isinstance(payload, str) else json.dumps(payload)
        try:
            self._sqs_client.send_message(body)
            return True
        except QueueError as e:
            logger.error(
                "Failed to publish to %s: %s", self._sqs_client.queue_name, e
            )
            return False
