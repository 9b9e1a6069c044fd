"""Models package."""

from aws_toolkit.models.roles import Role
from aws_toolkit.models.schemas import (
    BatchFailure,
    BatchResult,
    DrainEvent,
    DrainEventType,
    DrainRequest,
    QueueHandle,
    QueueMessage,
)

__all__ = [
    "BatchFailure",
    "BatchResult",
    "DrainEvent",
    "DrainEventType",
    "DrainRequest",
    "QueueHandle",
    "QueueMessage",
    "Role",
]
