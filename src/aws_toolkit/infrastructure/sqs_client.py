"""SQS client wrapper for AWS operations."""

import logging
from typing import Any, Callable

from botocore.exceptions import BotoCoreError, ClientError

from aws_toolkit.models.errors import (
    EmptyMessageBodyError,
    InvalidArgumentError,
    InvalidMessageEncodingError,
    MessageTooLongError,
    QueueNameMismatch,
    QueueNotFoundError,
    RoleViolation,
    TransientQueueError,
)
from aws_toolkit.models.roles import Role
from aws_toolkit.models.schemas import BatchFailure, BatchResult, QueueHandle, QueueMessage

logger = logging.getLogger(__name__)

MAX_MESSAGE_BYTES = 256 * 1024
MAX_BATCH_ENTRIES = 10

_NOT_FOUND_CODES = {"AWS.SimpleQueueService.NonExistentQueue", "QueueDoesNotExist"}

DEFAULT_QUEUE_ATTRIBUTES = {
    "DelaySeconds": "0",
    "MessageRetentionPeriod": "86400",
}


def validate_message_body(body: str, index: int | None = None) -> None:
    """
    Check a message body against the SQS constraints.

    Args:
        body: Message body.
        index: Position of the body in a batch, used in error messages.

    Raises:
        EmptyMessageBodyError: If the body is empty.
        InvalidMessageEncodingError: If the body cannot be encoded as UTF-8.
        MessageTooLongError: If the UTF-8 encoded body exceeds 256 KiB.
    """
    if not body:
        raise EmptyMessageBodyError(index)
    try:
        size = len(body.encode("utf-8"))
    except UnicodeEncodeError as e:
        raise InvalidMessageEncodingError(e.reason, index) from e
    if size > MAX_MESSAGE_BYTES:
        raise MessageTooLongError(size, MAX_MESSAGE_BYTES, index)


class SQSClient:
    """Handles SQS operations against a single queue."""

    def __init__(
        self,
        client: Any,
        queue_name: str = "",
        queue_url: str | None = None,
        role: Role | str = Role.ADMIN,
    ):
        """
        Initialize SQS client wrapper.

        The queue URL is resolved once here when it is not given.

        Args:
            client: boto3 SQS client instance.
            queue_name: Name of the queue this wrapper is bound to.
            queue_url: Queue URL; looked up from the name if omitted.
            role: Operations this wrapper is allowed to perform.
        """
        self._client = client
        try:
            self.role = Role(role)
        except ValueError as e:
            raise InvalidArgumentError(
                f"invalid role {role!r}, use letters from 'crd'"
            ) from e

        if not queue_url:
            if not queue_name:
                raise InvalidArgumentError("queue_name or queue_url is required")
            queue_url = self.get_queue_url(queue_name)
        if not queue_name:
            queue_name = queue_url.rstrip("/").rsplit("/", 1)[-1]

        self._handle = QueueHandle(name=queue_name, url=queue_url)
        logger.info("Connected to queue: %s", queue_name)

    @property
    def handle(self) -> QueueHandle:
        return self._handle

    @property
    def queue_url(self) -> str:
        return self._handle.url

    @property
    def queue_name(self) -> str:
        return self._handle.name

    def check_role(self, required: Role, operation: str) -> None:
        """Raise RoleViolation if the wrapper's role does not grant `required`."""
        if not self.role.allows(required):
            raise RoleViolation(self.role.value, required.value, operation)

    def _call(self, operation: str, method: Callable[..., Any], **kwargs: Any) -> Any:
        try:
            return method(**kwargs)
        except (ClientError, BotoCoreError) as e:
            logger.error("SQS %s failed: %s", operation, e)
            raise TransientQueueError(operation, e) from e

    def get_queue_url(self, name: str) -> str:
        """
        Look up the URL of a queue by name.

        Raises:
            QueueNotFoundError: If no queue has that name.
            TransientQueueError: On any other service error.
        """
        try:
            response = self._call(
                "GetQueueUrl", self._client.get_queue_url, QueueName=name
            )
        except TransientQueueError as e:
            if e.code in _NOT_FOUND_CODES:
                raise QueueNotFoundError(name) from e
            raise
        return response["QueueUrl"]

    def list_queues(self, prefix: str | None = None) -> list[str]:
        """Return the URLs of all queues, following pagination."""
        urls: list[str] = []
        next_token = None
        while True:
            kwargs: dict[str, Any] = {}
            if prefix:
                kwargs["QueueNamePrefix"] = prefix
            if next_token:
                kwargs["NextToken"] = next_token

            response = self._call("ListQueues", self._client.list_queues, **kwargs)
            urls.extend(response.get("QueueUrls", []))

            next_token = response.get("NextToken")
            if not next_token:
                return urls

    def create_queue(self, name: str, attributes: dict[str, str] | None = None) -> str:
        """
        Create a queue and return its URL.

        The wrapper stays bound to its original queue; build a new SQSClient
        to operate on the created one.
        """
        self.check_role(Role.CREATE, "create queue")
        response = self._call(
            "CreateQueue",
            self._client.create_queue,
            QueueName=name,
            Attributes=attributes or dict(DEFAULT_QUEUE_ATTRIBUTES),
        )
        logger.info("Created queue %s: %s", name, response["QueueUrl"])
        return response["QueueUrl"]

    def delete_queue(self, name: str) -> None:
        """
        Delete the bound queue, confirming it by name first.

        Raises:
            QueueNameMismatch: If `name` resolves to a different queue.
        """
        self.check_role(Role.DELETE, "delete queue")
        url = self.get_queue_url(name)
        if url != self.queue_url:
            raise QueueNameMismatch(name, url, self.queue_url)

        self._call("DeleteQueue", self._client.delete_queue, QueueUrl=url)
        logger.info("Deleted queue: %s", name)

    def purge(self) -> None:
        """Remove every message from the bound queue."""
        self.check_role(Role.DELETE, "purge queue")
        self._call("PurgeQueue", self._client.purge_queue, QueueUrl=self.queue_url)
        logger.info("Purged queue: %s", self.queue_name)

    def approximate_count(self) -> int:
        """Return the approximate number of visible messages in the queue."""
        self.check_role(Role.READ, "count messages")
        attribute = "ApproximateNumberOfMessages"
        response = self._call(
            "GetQueueAttributes",
            self._client.get_queue_attributes,
            QueueUrl=self.queue_url,
            AttributeNames=[attribute],
        )
        return int(response.get("Attributes", {}).get(attribute, 0))

    def receive_messages(
        self,
        batch_size: int = 10,
        wait_seconds: int = 2,
        visibility_timeout: int | None = None,
    ) -> list[QueueMessage]:
        """
        Receive messages from the queue.

        Args:
            batch_size: Maximum number of messages to receive (1-10).
            wait_seconds: Long polling wait time in seconds.
            visibility_timeout: Visibility timeout in seconds, queue default if None.

        Returns:
            Messages in the order returned by the service.
        """
        self.check_role(Role.READ, "receive messages")
        kwargs: dict[str, Any] = {
            "QueueUrl": self.queue_url,
            "MaxNumberOfMessages": batch_size,
            "WaitTimeSeconds": wait_seconds,
        }
        if visibility_timeout is not None:
            kwargs["VisibilityTimeout"] = visibility_timeout

        response = self._call("ReceiveMessage", self._client.receive_message, **kwargs)
        messages = [QueueMessage.from_response(raw) for raw in response.get("Messages", [])]
        if messages:
            logger.info("Received %d message(s) from SQS", len(messages))
        return messages

    def receive_message(self, wait_seconds: int = 2) -> QueueMessage | None:
        """Receive a single message, or None if the queue returned nothing."""
        messages = self.receive_messages(batch_size=1, wait_seconds=wait_seconds)
        return messages[0] if messages else None

    def delete_message(self, receipt_handle: str) -> None:
        """
        Delete a message from the queue.

        Args:
            receipt_handle: Message receipt handle.
        """
        self.check_role(Role.DELETE, "delete message")
        if not receipt_handle:
            raise InvalidArgumentError("receipt_handle is required")

        self._call(
            "DeleteMessage",
            self._client.delete_message,
            QueueUrl=self.queue_url,
            ReceiptHandle=receipt_handle,
        )
        logger.debug("Deleted message from SQS")

    def send_message(self, body: str) -> str:
        """
        Send a message to the queue.

        Args:
            body: Message body.

        Returns:
            The MessageId assigned by SQS.
        """
        self.check_role(Role.CREATE, "send message")
        validate_message_body(body)

        response = self._call(
            "SendMessage",
            self._client.send_message,
            QueueUrl=self.queue_url,
            MessageBody=body,
        )
        logger.info("Sent message to %s: %s", self.queue_name, response["MessageId"])
        return response["MessageId"]

    def send_message_batch(self, bodies: list[str]) -> BatchResult:
        """
        Send up to ten messages in one SendMessageBatch call.

        Entry ids are the 1-based positions of the bodies.

        Returns:
            BatchResult with the accepted ids and the rejected entries.
        """
        self.check_role(Role.CREATE, "send messages")
        if not bodies:
            return BatchResult()
        if len(bodies) > MAX_BATCH_ENTRIES:
            raise InvalidArgumentError(
                f"a batch holds at most {MAX_BATCH_ENTRIES} messages, got {len(bodies)}"
            )
        for i, body in enumerate(bodies):
            validate_message_body(body, i)

        entries = [
            {"Id": str(i), "MessageBody": body}
            for i, body in enumerate(bodies, start=1)
        ]
        response = self._call(
            "SendMessageBatch",
            self._client.send_message_batch,
            QueueUrl=self.queue_url,
            Entries=entries,
        )

        result = BatchResult(
            successful=[entry["Id"] for entry in response.get("Successful", [])],
            failed=[
                BatchFailure(
                    id=entry["Id"],
                    index=int(entry["Id"]) - 1,
                    code=entry.get("Code"),
                    message=entry.get("Message"),
                    sender_fault=entry.get("SenderFault", False),
                )
                for entry in response.get("Failed", [])
            ],
        )
        if result.failed:
            logger.warning(
                "Batch send to %s: %d sent, %d failed",
                self.queue_name,
                result.sent,
                len(result.failed),
            )
        return result
