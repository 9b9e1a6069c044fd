"""Configuration management for the queue toolkit."""

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env file from project root
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(env_path)


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name, str(default))
    try:
        return int(value)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {value!r}") from e


@dataclass
class Config:
    """Toolkit configuration loaded from environment variables."""

    # AWS
    aws_region: str = field(default_factory=lambda: os.getenv("AWS_REGION", "us-east-1"))
    aws_role_arn: str = field(default_factory=lambda: os.getenv("AWS_ROLE_ARN", ""))

    # SQS
    queue_name: str = field(default_factory=lambda: os.getenv("SQS_QUEUE_NAME", ""))
    queue_url: str = field(default_factory=lambda: os.getenv("SQS_QUEUE_URL", ""))
    role: str = field(default_factory=lambda: os.getenv("SQS_ROLE", "crd"))
    batch_size: int = field(default_factory=lambda: _env_int("SQS_BATCH_SIZE", 10))
    wait_seconds: int = field(default_factory=lambda: _env_int("SQS_WAIT_SECONDS", 2))
    visibility_timeout: int = field(
        default_factory=lambda: _env_int("SQS_VISIBILITY_TIMEOUT", 0)
    )

    # Requests and retries
    request_timeout: int = field(
        default_factory=lambda: _env_int("SQS_REQUEST_TIMEOUT", 60)
    )
    max_attempts: int = field(default_factory=lambda: _env_int("SQS_MAX_ATTEMPTS", 3))
    backoff_max: int = field(default_factory=lambda: _env_int("SQS_BACKOFF_MAX", 10))

    def validate(self) -> None:
        """Validate required configuration."""
        if not self.queue_name and not self.queue_url:
            raise ValueError(
                "SQS_QUEUE_NAME or SQS_QUEUE_URL environment variable is required"
            )
        if not 1 <= self.batch_size <= 10:
            raise ValueError("SQS_BATCH_SIZE must be between 1 and 10")
        if not 0 <= self.wait_seconds <= 20:
            raise ValueError("SQS_WAIT_SECONDS must be between 0 and 20")
        if self.max_attempts < 1:
            raise ValueError("SQS_MAX_ATTEMPTS must be at least 1")
