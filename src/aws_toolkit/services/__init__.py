from .chunker import chunk
from .sqs_drainer import DrainSession, QueueDrainer
from .sqs_publisher import QueuePublisher
from .sqs_receiver import QueueReceiver
from .sqs_sender import QueueSender

__all__ = [
    "chunk",
    "DrainSession",
    "QueueDrainer",
    "QueuePublisher",
    "QueueReceiver",
    "QueueSender",
]
