"""Tests for infrastructure layer."""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError
from dependency_injector import providers

from aws_toolkit.config import Config
from aws_toolkit.infrastructure.dependency_injection import DependenciesContainer
from aws_toolkit.infrastructure.sqs_client import MAX_MESSAGE_BYTES, SQSClient
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
from aws_toolkit.services.sqs_drainer import QueueDrainer
from aws_toolkit.services.sqs_sender import QueueSender

QUEUE_URL = "https://sqs.us-east-1.amazonaws.com/123456789012/test-queue"


def make_client(mock_boto_client, role=Role.ADMIN):
    return SQSClient(mock_boto_client, queue_name="test-queue", queue_url=QUEUE_URL, role=role)


class TestSQSClientInit:
    """Tests for SQSClient construction."""

    def test_resolves_queue_url_from_name(self):
        """Test the queue URL is looked up once when only a name is given."""
        mock_boto_client = MagicMock()
        mock_boto_client.get_queue_url.return_value = {"QueueUrl": QUEUE_URL}

        client = SQSClient(mock_boto_client, queue_name="test-queue")

        assert client.queue_url == QUEUE_URL
        assert client.handle.name == "test-queue"
        mock_boto_client.get_queue_url.assert_called_once_with(QueueName="test-queue")

    def test_derives_name_from_url(self):
        """Test the queue name is taken from the URL when only a URL is given."""
        client = SQSClient(MagicMock(), queue_url=QUEUE_URL)

        assert client.queue_name == "test-queue"

    def test_missing_queue_raises_not_found(self):
        """Test a non-existent queue raises QueueNotFoundError."""
        mock_boto_client = MagicMock()
        error_response = {"Error": {"Code": "AWS.SimpleQueueService.NonExistentQueue"}}
        mock_boto_client.get_queue_url.side_effect = ClientError(
            error_response, "GetQueueUrl"
        )

        with pytest.raises(QueueNotFoundError):
            SQSClient(mock_boto_client, queue_name="missing")

    def test_requires_name_or_url(self):
        """Test construction without name or URL is rejected."""
        with pytest.raises(InvalidArgumentError):
            SQSClient(MagicMock())

    def test_handle_is_immutable(self):
        """Test the queue handle cannot be changed after construction."""
        client = make_client(MagicMock())

        with pytest.raises(Exception):
            client.handle.url = "https://other"


class TestSQSClient:
    """Tests for SQSClient operations."""

    def test_approximate_count(self):
        """Test approximate_count parses the attribute value."""
        mock_boto_client = MagicMock()
        mock_boto_client.get_queue_attributes.return_value = {
            "Attributes": {"ApproximateNumberOfMessages": "42"}
        }

        client = make_client(mock_boto_client)

        assert client.approximate_count() == 42
        mock_boto_client.get_queue_attributes.assert_called_once_with(
            QueueUrl=QUEUE_URL,
            AttributeNames=["ApproximateNumberOfMessages"],
        )

    def test_approximate_count_error(self):
        """Test approximate_count raises TransientQueueError on service error."""
        mock_boto_client = MagicMock()
        mock_boto_client.get_queue_attributes.side_effect = ClientError(
            {"Error": {"Code": "ServiceUnavailable"}}, "GetQueueAttributes"
        )

        client = make_client(mock_boto_client)

        with pytest.raises(TransientQueueError) as exc_info:
            client.approximate_count()
        assert exc_info.value.code == "ServiceUnavailable"
        assert exc_info.value.operation == "GetQueueAttributes"

    def test_receive_messages_success(self):
        """Test receive_messages returns messages in service order."""
        mock_boto_client = MagicMock()
        mock_boto_client.receive_message.return_value = {
            "Messages": [
                {"MessageId": "m1", "Body": "first", "ReceiptHandle": "h1"},
                {"MessageId": "m2", "Body": "second", "ReceiptHandle": "h2"},
            ]
        }

        client = make_client(mock_boto_client)
        messages = client.receive_messages(batch_size=5, wait_seconds=3)

        assert [m.body for m in messages] == ["first", "second"]
        assert messages[1].receipt_handle == "h2"
        mock_boto_client.receive_message.assert_called_once_with(
            QueueUrl=QUEUE_URL,
            MaxNumberOfMessages=5,
            WaitTimeSeconds=3,
        )

    def test_receive_messages_with_visibility_timeout(self):
        """Test visibility timeout is forwarded only when given."""
        mock_boto_client = MagicMock()
        mock_boto_client.receive_message.return_value = {}

        client = make_client(mock_boto_client)
        messages = client.receive_messages(batch_size=1, wait_seconds=0, visibility_timeout=30)

        assert messages == []
        _, kwargs = mock_boto_client.receive_message.call_args
        assert kwargs["VisibilityTimeout"] == 30

    def test_receive_message_empty(self):
        """Test receive_message returns None when nothing arrived."""
        mock_boto_client = MagicMock()
        mock_boto_client.receive_message.return_value = {}

        client = make_client(mock_boto_client)

        assert client.receive_message() is None

    def test_receive_messages_error(self):
        """Test receive_messages raises on service error."""
        mock_boto_client = MagicMock()
        mock_boto_client.receive_message.side_effect = ClientError(
            {"Error": {"Code": "InternalError"}}, "ReceiveMessage"
        )

        client = make_client(mock_boto_client)

        with pytest.raises(TransientQueueError):
            client.receive_messages()

    def test_delete_message_twice_calls_service_twice(self):
        """Test deleting the same handle twice goes to the service both times."""
        mock_boto_client = MagicMock()

        client = make_client(mock_boto_client)
        client.delete_message("test-handle")
        client.delete_message("test-handle")

        assert mock_boto_client.delete_message.call_count == 2
        mock_boto_client.delete_message.assert_called_with(
            QueueUrl=QUEUE_URL,
            ReceiptHandle="test-handle",
        )

    def test_delete_message_surfaces_service_error(self):
        """Test a service error on delete is reported as TransientQueueError."""
        mock_boto_client = MagicMock()
        mock_boto_client.delete_message.side_effect = ClientError(
            {"Error": {"Code": "ReceiptHandleIsInvalid"}}, "DeleteMessage"
        )

        client = make_client(mock_boto_client)

        with pytest.raises(TransientQueueError) as exc_info:
            client.delete_message("stale-handle")
        assert exc_info.value.code == "ReceiptHandleIsInvalid"

    def test_send_message_success(self):
        """Test send_message returns the message id."""
        mock_boto_client = MagicMock()
        mock_boto_client.send_message.return_value = {"MessageId": "abc"}

        client = make_client(mock_boto_client)

        assert client.send_message("hello") == "abc"
        mock_boto_client.send_message.assert_called_once_with(
            QueueUrl=QUEUE_URL, MessageBody="hello"
        )

    def test_send_message_empty_body(self):
        """Test empty bodies are rejected locally."""
        mock_boto_client = MagicMock()

        client = make_client(mock_boto_client)

        with pytest.raises(EmptyMessageBodyError):
            client.send_message("")
        mock_boto_client.send_message.assert_not_called()

    def test_send_message_too_long(self):
        """Test bodies over 256 KiB are rejected locally."""
        mock_boto_client = MagicMock()
        mock_boto_client.send_message.return_value = {"MessageId": "abc"}

        client = make_client(mock_boto_client)

        client.send_message("a" * MAX_MESSAGE_BYTES)
        with pytest.raises(MessageTooLongError):
            client.send_message("a" * (MAX_MESSAGE_BYTES + 1))
        assert mock_boto_client.send_message.call_count == 1

    def test_send_message_unencodable_body(self):
        """Test bodies that cannot be UTF-8 encoded raise a typed error."""
        mock_boto_client = MagicMock()

        client = make_client(mock_boto_client)

        with pytest.raises(InvalidMessageEncodingError) as exc_info:
            client.send_message("bad \ud800 body")
        assert isinstance(exc_info.value, InvalidArgumentError)
        assert exc_info.value.index is None
        mock_boto_client.send_message.assert_not_called()

    def test_send_message_batch_maps_failures(self):
        """Test batch entries are numbered from 1 and failures map to indices."""
        mock_boto_client = MagicMock()
        mock_boto_client.send_message_batch.return_value = {
            "Successful": [{"Id": "1"}, {"Id": "3"}],
            "Failed": [
                {"Id": "2", "Code": "InvalidMessageContents", "SenderFault": True}
            ],
        }

        client = make_client(mock_boto_client)
        result = client.send_message_batch(["a", "b", "c"])

        assert result.sent == 2
        assert result.failed[0].index == 1
        assert result.failed[0].code == "InvalidMessageContents"
        assert result.failed[0].sender_fault is True
        _, kwargs = mock_boto_client.send_message_batch.call_args
        assert kwargs["Entries"] == [
            {"Id": "1", "MessageBody": "a"},
            {"Id": "2", "MessageBody": "b"},
            {"Id": "3", "MessageBody": "c"},
        ]

    def test_send_message_batch_empty(self):
        """Test an empty batch makes no call."""
        mock_boto_client = MagicMock()

        client = make_client(mock_boto_client)
        result = client.send_message_batch([])

        assert result.sent == 0
        mock_boto_client.send_message_batch.assert_not_called()

    def test_send_message_batch_too_many(self):
        """Test more than ten entries are rejected."""
        client = make_client(MagicMock())

        with pytest.raises(InvalidArgumentError):
            client.send_message_batch(["x"] * 11)

    def test_list_queues_follows_pagination(self):
        """Test list_queues collects every page."""
        mock_boto_client = MagicMock()
        mock_boto_client.list_queues.side_effect = [
            {"QueueUrls": ["url-1", "url-2"], "NextToken": "t1"},
            {"QueueUrls": ["url-3"]},
        ]

        client = make_client(mock_boto_client)

        assert client.list_queues(prefix="test") == ["url-1", "url-2", "url-3"]
        mock_boto_client.list_queues.assert_called_with(
            QueueNamePrefix="test", NextToken="t1"
        )

    def test_create_queue_default_attributes(self):
        """Test create_queue applies default attributes."""
        mock_boto_client = MagicMock()
        mock_boto_client.create_queue.return_value = {"QueueUrl": "new-url"}

        client = make_client(mock_boto_client)

        assert client.create_queue("new-queue") == "new-url"
        mock_boto_client.create_queue.assert_called_once_with(
            QueueName="new-queue",
            Attributes={"DelaySeconds": "0", "MessageRetentionPeriod": "86400"},
        )
        assert client.queue_url == QUEUE_URL

    def test_delete_queue_success(self):
        """Test delete_queue deletes the bound queue."""
        mock_boto_client = MagicMock()
        mock_boto_client.get_queue_url.return_value = {"QueueUrl": QUEUE_URL}

        client = make_client(mock_boto_client)
        client.delete_queue("test-queue")

        mock_boto_client.delete_queue.assert_called_once_with(QueueUrl=QUEUE_URL)

    def test_delete_queue_name_mismatch(self):
        """Test delete_queue refuses a queue other than the bound one."""
        mock_boto_client = MagicMock()
        mock_boto_client.get_queue_url.return_value = {"QueueUrl": "https://other/queue"}

        client = make_client(mock_boto_client)

        with pytest.raises(QueueNameMismatch):
            client.delete_queue("other")
        mock_boto_client.delete_queue.assert_not_called()

    def test_purge(self):
        """Test purge calls PurgeQueue on the bound queue."""
        mock_boto_client = MagicMock()

        client = make_client(mock_boto_client)
        client.purge()

        mock_boto_client.purge_queue.assert_called_once_with(QueueUrl=QUEUE_URL)

    def test_role_violation(self):
        """Test a producer cannot delete messages."""
        mock_boto_client = MagicMock()

        client = make_client(mock_boto_client, role=Role.PRODUCER)

        with pytest.raises(RoleViolation):
            client.delete_message("handle")
        mock_boto_client.delete_message.assert_not_called()

    def test_consumer_cannot_send(self):
        """Test a consumer cannot send messages."""
        client = make_client(MagicMock(), role="rd")

        with pytest.raises(RoleViolation):
            client.send_message("hello")

    def test_role_letters_in_any_order(self):
        """Test a role grant written as "dr" is accepted as a consumer."""
        client = make_client(MagicMock(), role="dr")

        assert client.role is Role.CONSUMER

    def test_invalid_role(self):
        """Test an unknown role letter raises a typed error."""
        with pytest.raises(InvalidArgumentError, match="invalid role"):
            make_client(MagicMock(), role="rx")


class TestDependenciesContainer:
    """Tests for the DI container wiring."""

    def test_builds_services_from_config(self):
        """Test services are wired to one SQSClient built from config."""
        mock_boto_client = MagicMock()
        container = DependenciesContainer()
        container.config.override(
            providers.Object(Config(queue_url=QUEUE_URL, max_attempts=5))
        )
        container.sqs_boto_client.override(providers.Object(mock_boto_client))

        sqs_client = container.sqs_client()
        drainer = container.queue_drainer()
        sender = container.queue_sender()

        assert sqs_client.queue_url == QUEUE_URL
        assert sqs_client.role is Role.ADMIN
        assert isinstance(drainer, QueueDrainer)
        assert isinstance(sender, QueueSender)
        assert container.queue_receiver().queue_url == QUEUE_URL
        mock_boto_client.get_queue_url.assert_not_called()
