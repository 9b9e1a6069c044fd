"""Pydantic models for queue handles, messages and drain events."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class QueueHandle(BaseModel):
    """Resolved reference to a named SQS queue."""

    model_config = ConfigDict(frozen=True)

    name: str
    url: str


class QueueMessage(BaseModel):
    """Message received from an SQS queue."""

    message_id: str | None = None
    body: str
    receipt_handle: str | None = None
    attributes: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_response(cls, raw: dict) -> "QueueMessage":
        """Build a message from one entry of a ReceiveMessage response."""
        return cls(
            message_id=raw.get("MessageId"),
            body=raw.get("Body", ""),
            receipt_handle=raw.get("ReceiptHandle"),
            attributes=raw.get("Attributes", {}),
        )


class DrainRequest(BaseModel):
    """Options for one drain session."""

    max_messages: int = Field(default=0, ge=0)
    batch_size: int = Field(default=10, ge=1, le=10)
    wait_seconds: int = Field(default=2, ge=0, le=20)
    visibility_timeout: int | None = Field(default=None, ge=0, le=43200)


class DrainEventType(str, Enum):
    DELIVERED = "delivered"
    EXHAUSTED = "exhausted"
    QUOTA_REACHED = "quota_reached"
    FAILED = "failed"


class DrainEvent(BaseModel):
    """Single event published by a drain session."""

    model_config = ConfigDict(frozen=True)

    type: DrainEventType
    body: str | None = None
    receipt_handle: str | None = None
    message_id: str | None = None
    error: str | None = None
    terminal: bool = False

    @classmethod
    def delivered(cls, message: QueueMessage) -> "DrainEvent":
        return cls(
            type=DrainEventType.DELIVERED,
            body=message.body,
            receipt_handle=message.receipt_handle,
            message_id=message.message_id,
        )

    @classmethod
    def exhausted(cls) -> "DrainEvent":
        return cls(type=DrainEventType.EXHAUSTED, terminal=True)

    @classmethod
    def quota_reached(cls) -> "DrainEvent":
        return cls(type=DrainEventType.QUOTA_REACHED, terminal=True)

    @classmethod
    def failed(cls, error: Exception | str, terminal: bool = False) -> "DrainEvent":
        return cls(type=DrainEventType.FAILED, error=str(error), terminal=terminal)

    def to_message(self) -> QueueMessage:
        """Convert a delivered event back into a QueueMessage."""
        return QueueMessage(
            message_id=self.message_id,
            body=self.body or "",
            receipt_handle=self.receipt_handle,
        )


class BatchFailure(BaseModel):
    """One rejected entry of a SendMessageBatch call."""

    id: str
    index: int
    chunk: int = 0
    code: str | None = None
    message: str | None = None
    sender_fault: bool = False


class BatchResult(BaseModel):
    """Outcome of a single SendMessageBatch call."""

    successful: list[str] = Field(default_factory=list)
    failed: list[BatchFailure] = Field(default_factory=list)

    @property
    def sent(self) -> int:
        return len(self.successful)
