"""Dependency injection container for the toolkit."""

import boto3
from botocore.config import Config as BotoConfig
from dependency_injector import providers
from dependency_injector.containers import DeclarativeContainer

from aws_toolkit.config import Config
from aws_toolkit.infrastructure.sqs_client import SQSClient


def _create_session(cfg: Config) -> boto3.Session:
    """Create boto3 session, assuming AWS_ROLE_ARN when it is set."""
    if not cfg.aws_role_arn:
        return boto3.Session(region_name=cfg.aws_region)

    sts = boto3.client("sts", region_name=cfg.aws_region)
    assumed = sts.assume_role(RoleArn=cfg.aws_role_arn, RoleSessionName="aws-toolkit")
    credentials = assumed["Credentials"]

    return boto3.Session(
        aws_access_key_id=credentials["AccessKeyId"],
        aws_secret_access_key=credentials["SecretAccessKey"],
        aws_session_token=credentials["SessionToken"],
        region_name=cfg.aws_region,
    )


def _create_sqs_boto_client(session: boto3.Session, cfg: Config):
    # Long polls must fit inside the read timeout.
    read_timeout = max(cfg.request_timeout, cfg.wait_seconds + 5)
    return session.client(
        "sqs",
        config=BotoConfig(
            connect_timeout=cfg.request_timeout,
            read_timeout=read_timeout,
            retries={"max_attempts": 0, "mode": "standard"},
        ),
    )


def _create_queue_drainer(sqs_client: SQSClient, cfg: Config):
    """Factory for QueueDrainer to avoid circular import."""
    from aws_toolkit.services.sqs_drainer import QueueDrainer

    return QueueDrainer(
        sqs_client,
        max_attempts=cfg.max_attempts,
        backoff_max=cfg.backoff_max,
    )


def _create_queue_sender(sqs_client: SQSClient, cfg: Config):
    """Factory for QueueSender to avoid circular import."""
    from aws_toolkit.services.sqs_sender import QueueSender

    return QueueSender(sqs_client, batch_size=cfg.batch_size, backoff_max=cfg.backoff_max)


def _create_queue_publisher(sqs_client: SQSClient):
    """Factory for QueuePublisher to avoid circular import."""
    from aws_toolkit.services.sqs_publisher import QueuePublisher

    return QueuePublisher(sqs_client)


def _create_queue_receiver(sqs_client: SQSClient):
    """Factory for QueueReceiver to avoid circular import."""
    from aws_toolkit.services.sqs_receiver import QueueReceiver

    return QueueReceiver(sqs_client)


class DependenciesContainer(DeclarativeContainer):
    """DI container for the toolkit."""

    config = providers.Singleton(Config)

    session = providers.Singleton(_create_session, cfg=config)

    # SQS dependency chain
    sqs_boto_client = providers.Singleton(
        _create_sqs_boto_client,
        session=session,
        cfg=config,
    )

    sqs_client = providers.Singleton(
        SQSClient,
        client=sqs_boto_client,
        queue_name=config.provided.queue_name,
        queue_url=config.provided.queue_url,
        role=config.provided.role,
    )

    queue_drainer = providers.Singleton(
        _create_queue_drainer,
        sqs_client=sqs_client,
        cfg=config,
    )

    queue_sender = providers.Singleton(
        _create_queue_sender,
        sqs_client=sqs_client,
        cfg=config,
    )

    queue_publisher = providers.Singleton(
        _create_queue_publisher,
        sqs_client=sqs_client,
    )

    queue_receiver = providers.Singleton(
        _create_queue_receiver,
        sqs_client=sqs_client,
    )
