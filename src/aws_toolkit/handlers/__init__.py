"""Handlers package."""

from aws_toolkit.handlers.consumer import ConsumeStats, consume_messages

__all__ = ["ConsumeStats", "consume_messages"]
