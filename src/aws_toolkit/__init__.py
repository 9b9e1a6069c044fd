"""Convenience layer over boto3 SQS."""

from aws_toolkit.infrastructure.sqs_client import SQSClient
from aws_toolkit.models.errors import (
    EmptyMessageBodyError,
    InvalidArgumentError,
    InvalidMessageEncodingError,
    MessageTooLongError,
    PartialBatchFailure,
    QueueError,
    QueueNameMismatch,
    QueueNotFoundError,
    RoleViolation,
    TransientQueueError,
)
from aws_toolkit.models.schemas import DrainEvent, DrainEventType, DrainRequest
from aws_toolkit.services.sqs_drainer import DrainSession, QueueDrainer
from aws_toolkit.services.sqs_sender import QueueSender

__all__ = [
    "DrainEvent",
    "DrainEventType",
    "DrainRequest",
    "DrainSession",
    "EmptyMessageBodyError",
    "InvalidArgumentError",
    "InvalidMessageEncodingError",
    "MessageTooLongError",
    "PartialBatchFailure",
    "QueueDrainer",
    "QueueError",
    "QueueNameMismatch",
    "QueueNotFoundError",
    "QueueSender",
    "RoleViolation",
    "SQSClient",
    "TransientQueueError",
]
