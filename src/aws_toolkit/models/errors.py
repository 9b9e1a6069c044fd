"""Exceptions raised by the queue wrappers."""

from typing import Any


class QueueError(Exception):
    """Base class for all queue errors."""


class TransientQueueError(QueueError):
    """Network or service error while talking to SQS."""

    def __init__(self, operation: str, cause: Exception | None = None):
        """
        Initialize a transient error.

        Args:
            operation: Name of the SQS operation that failed.
            cause: Underlying boto3/botocore exception, if any.
        """
        self.operation = operation
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"{operation} failed{detail}")

    @property
    def code(self) -> str | None:
        """Error code reported by the service, when available."""
        response = getattr(self.cause, "response", None)
        if not response:
            return None
        return response.get("Error", {}).get("Code")


class QueueNotFoundError(QueueError):
    """The named queue does not exist."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"queue not found: {name}")


class InvalidArgumentError(QueueError, ValueError):
    """An argument violates the operation's input contract."""


class EmptyMessageBodyError(InvalidArgumentError):
    """A message body was empty."""

    def __init__(self, index: int | None = None):
        self.index = index
        where = f" at index {index}" if index is not None else ""
        super().__init__(f"message body is empty{where}")


class MessageTooLongError(InvalidArgumentError):
    """A message body exceeds the SQS size limit."""

    def __init__(self, size: int, limit: int, index: int | None = None):
        self.size = size
        self.limit = limit
        self.index = index
        where = f" at index {index}" if index is not None else ""
        super().__init__(f"message body{where} is {size} bytes, limit is {limit}")


class InvalidMessageEncodingError(InvalidArgumentError):
    """A message body cannot be encoded as UTF-8."""

    def __init__(self, reason: str, index: int | None = None):
        self.reason = reason
        self.index = index
        where = f" at index {index}" if index is not None else ""
        super().__init__(f"message body{where} is not valid UTF-8: {reason}")


class PartialBatchFailure(QueueError):
    """Some entries of a batch send were rejected by the service."""

    def __init__(self, sent: int, failures: list[Any]):
        """
        Initialize a partial batch failure.

        Args:
            sent: Number of messages the service accepted across all chunks.
            failures: BatchFailure entries for every rejected message.
        """
        self.sent = sent
        self.failures = failures
        chunks: dict[int, int] = {}
        for failure in failures:
            chunks[failure.chunk] = chunks.get(failure.chunk, 0) + 1
        summary = ", ".join(f"chunk {c}: {n} failed" for c, n in sorted(chunks.items()))
        super().__init__(f"{len(failures)} message(s) rejected, {sent} sent ({summary})")

    @property
    def failed_count(self) -> int:
        return len(self.failures)


class QueueNameMismatch(QueueError):
    """An operation targeted a queue other than the one the client is bound to."""

    def __init__(self, name: str, url: str, expected_url: str):
        self.name = name
        self.url = url
        self.expected_url = expected_url
        super().__init__(
            f"queue {name!r} resolves to {url}, client is bound to {expected_url}"
        )


class RoleViolation(QueueError):
    """The client's role does not allow the requested operation."""

    def __init__(self, role: str, required: str, operation: str):
        self.role = role
        self.required = required
        self.operation = operation
        super().__init__(
            f"role {role!r} is not allowed to {operation} (requires {required!r})"
        )
