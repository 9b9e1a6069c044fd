"""Infrastructure package."""

from aws_toolkit.infrastructure.dependency_injection import DependenciesContainer
from aws_toolkit.infrastructure.sqs_client import SQSClient

__all__ = [
    "DependenciesContainer",
    "SQSClient",
]
