"""Consumer loop that processes and deletes drained messages."""

import logging
from dataclasses import dataclass, field
from typing import Callable

from aws_toolkit.infrastructure.sqs_client import SQSClient
from aws_toolkit.models.errors import QueueError
from aws_toolkit.models.schemas import DrainEventType, QueueMessage
from aws_toolkit.services.sqs_drainer import DrainSession

logger = logging.getLogger(__name__)


@dataclass
class ConsumeStats:
    """Counters for one consume run."""

    processed: int = 0
    failed: int = 0
    deleted: int = 0
    errors: list[str] = field(default_factory=list)
    outcome: DrainEventType | None = None


def consume_messages(
    session: DrainSession,
    sqs_client: SQSClient,
    process: Callable[[QueueMessage], bool],
    delete_failed: bool = False,
) -> ConsumeStats:
    """
    Process every message delivered by a drain session.

    A message is deleted once `process` returns True. Messages whose
    processing fails stay on the queue and reappear after their visibility
    timeout, unless `delete_failed` is set.

    Args:
        session: Running drain session.
        sqs_client: Client used to delete processed messages.
        process: Callback returning True when the message was handled.
        delete_failed: Also delete messages whose processing failed.

    Returns:
        ConsumeStats for the run.
    """
    stats = ConsumeStats()

    for event in session:
        if event.type is DrainEventType.FAILED:
            stats.errors.append(event.error or "")
            if event.terminal:
                stats.outcome = event.type
            continue

        if event.type is not DrainEventType.DELIVERED:
            stats.outcome = event.type
            continue

        message = event.to_message()
        try:
            ok = process(message)
        except Exception as e:
            logger.error("Failed to process message %s: %s", message.message_id, e, exc_info=True)
            ok = False

        if ok:
            stats.processed += 1
        else:
            stats.failed += 1

        if ok or delete_failed:
            try:
                sqs_client.delete_message(message.receipt_handle or "")
                stats.deleted += 1
            except QueueError as e:
                logger.error("Failed to delete message %s: %s", message.message_id, e)
                stats.errors.append(str(e))

        logger.info("Stats: %d success, %d failed", stats.processed, stats.failed)

    logger.info(
        "Consume finished (%s): %d processed, %d failed, %d deleted",
        stats.outcome.value if stats.outcome else "cancelled",
        stats.processed,
        stats.failed,
        stats.deleted,
    )
    return stats
