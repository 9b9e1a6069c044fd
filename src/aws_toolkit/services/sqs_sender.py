"""Send messages to SQS in batches."""

import logging

from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from aws_toolkit.infrastructure.sqs_client import (
    MAX_BATCH_ENTRIES,
    SQSClient,
    validate_message_body,
)
from aws_toolkit.models.errors import PartialBatchFailure, TransientQueueError
from aws_toolkit.models.schemas import BatchFailure
from aws_toolkit.services.chunker import chunk

logger = logging.getLogger(__name__)


class QueueSender:
    """Sends message bodies to a queue, chunked into SendMessageBatch calls."""

    def __init__(
        self,
        sqs_client: SQSClient,
        batch_size: int = MAX_BATCH_ENTRIES,
        backoff_multiplier: float = 1.0,
        backoff_max: float = 10.0,
    ):
        """
        Initialize the sender.

        Args:
            sqs_client: Wrapper bound to the destination queue.
            batch_size: Messages per SendMessageBatch call (at most 10).
            backoff_multiplier: Exponential backoff multiplier for retried sends.
            backoff_max: Upper bound of a single backoff wait in seconds.
        """
        self._sqs_client = sqs_client
        self._batch_size = batch_size
        self._backoff_multiplier = backoff_multiplier
        self._backoff_max = backoff_max

    def send_message(self, body: str) -> str:
        """Send one message and return its MessageId."""
        return self._sqs_client.send_message(body)

    def send_message_with_retry(self, body: str, attempts: int = 3) -> str:
        """
        Send one message, retrying transient failures with backoff.

        Raises:
            TransientQueueError: If every attempt failed.
        """
        retrying = Retrying(
            stop=stop_after_attempt(attempts),
            wait=wait_exponential(
                multiplier=self._backoff_multiplier, max=self._backoff_max
            ),
            retry=retry_if_exception_type(TransientQueueError),
            reraise=True,
        )
        return retrying(self._sqs_client.send_message, body)

    def send_messages(self, bodies: list[str], batch_size: int | None = None) -> int:
        """
        Send all bodies, one batch call per chunk.

        Every body is validated before anything is sent. All chunks are
        attempted even when one of them has rejected entries; chunks already
        accepted are never rolled back.

        Args:
            bodies: Message bodies in send order.
            batch_size: Override of the configured batch size.

        Returns:
            Number of messages accepted by the service.

        Raises:
            InvalidArgumentError: If a body is empty or too long.
            PartialBatchFailure: If the service rejected any entry.
            TransientQueueError: If a batch call itself failed.
        """
        size = min(batch_size or self._batch_size, MAX_BATCH_ENTRIES)
        for i, body in enumerate(bodies):
            validate_message_body(body, i)

        sent = 0
        failures: list[BatchFailure] = []
        for chunk_index, bodies_chunk in enumerate(chunk(bodies, size)):
            result = self._sqs_client.send_message_batch(bodies_chunk)
            sent += result.sent
            offset = chunk_index * size
            failures.extend(
                failure.model_copy(
                    update={"chunk": chunk_index, "index": offset + failure.index}
                )
                for failure in result.failed
            )

        logger.info(
            "Sent %d/%d message(s) to %s", sent, len(bodies), self._sqs_client.queue_name
        )
        if failures:
            raise PartialBatchFailure(sent, failures)
        return sent
