"""SQS receiver service for polling messages."""

import logging

from aws_toolkit.infrastructure.sqs_client import SQSClient
from aws_toolkit.models.errors import QueueError
from aws_toolkit.models.schemas import QueueMessage

logger = logging.getLogger(__name__)


class QueueReceiver:
    """Receives and deletes messages, logging failures instead of raising."""

    def __init__(self, sqs_client: SQSClient):
        """
        Initialize SQS receiver.

        Args:
            sqs_client: SQSClient instance.
        """
        self._sqs_client = sqs_client

    @property
    def queue_url(self) -> str:
        """Get the SQS queue URL."""
        return self._sqs_client.queue_url

    def receive(
        self,
        max_messages: int = 1,
        wait_time: int = 20,
    ) -> list[QueueMessage]:
        """
        Receive messages from SQS queue.

        Args:
            max_messages: Maximum number of messages to receive.
            wait_time: Long polling wait time in seconds.

        Returns:
            List of QueueMessage objects, empty on failure.
        """
        try:
            return self._sqs_client.receive_messages(
                batch_size=max_messages,
                wait_seconds=wait_time,
            )
        except QueueError as e:
            logger.error("Failed to receive messages from SQS: %s", e)
            return []

    def delete(self, message: QueueMessage) -> bool:
        """
        Delete a message from SQS queue.

        Args:
            message: QueueMessage to delete.

        Returns:
            True if deletion succeeded, False otherwise.
        """
        if not message.receipt_handle:
            logger.error("Message has no receipt handle")
            return False

        try:
            self._sqs_client.delete_message(message.receipt_handle)
            return True
        except QueueError as e:
            logger.error("Failed to delete message from SQS: %s", e)
            return False
