"""Command line entry point for queue operations."""

import argparse
import logging
import sys

from aws_toolkit.handlers.consumer import consume_messages
from aws_toolkit.infrastructure.dependency_injection import DependenciesContainer
from aws_toolkit.models.errors import PartialBatchFailure, QueueError
from aws_toolkit.models.schemas import DrainEventType, DrainRequest, QueueMessage

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.StreamHandler(sys.stderr),
    ],
)
logger = logging.getLogger(__name__)


def _read_lines(paths: list[str]) -> list[str]:
    if not paths:
        return [line.rstrip("\n") for line in sys.stdin if line.strip()]

    lines = []
    for path in paths:
        with open(path, encoding="utf-8") as f:
            lines.extend(line.rstrip("\n") for line in f if line.strip())
    return lines


def cmd_count(container: DependenciesContainer, args: argparse.Namespace) -> int:
    print(container.sqs_client().approximate_count())
    return 0


def cmd_send(container: DependenciesContainer, args: argparse.Namespace) -> int:
    bodies = _read_lines(args.files)
    if not bodies:
        logger.info("No messages to send")
        return 0

    try:
        sent = container.queue_sender().send_messages(bodies, batch_size=args.batch)
    except PartialBatchFailure as e:
        for failure in e.failures:
            logger.error(
                "Rejected message %d (chunk %d): %s %s",
                failure.index,
                failure.chunk,
                failure.code,
                failure.message,
            )
        print(e.sent)
        return 1

    print(sent)
    return 0


def cmd_drain(container: DependenciesContainer, args: argparse.Namespace) -> int:
    cfg = container.config()
    request = DrainRequest(
        max_messages=args.max,
        batch_size=args.batch or cfg.batch_size,
        wait_seconds=cfg.wait_seconds if args.wait is None else args.wait,
        visibility_timeout=cfg.visibility_timeout or None,
    )

    def emit(message: QueueMessage) -> bool:
        print(message.body, flush=True)
        return True

    with container.queue_drainer().start(request, maxsize=request.batch_size) as session:
        if args.delete:
            stats = consume_messages(session, container.sqs_client(), emit)
            logger.info("Drained %d message(s), %d deleted", stats.processed, stats.deleted)
            return 1 if stats.outcome is DrainEventType.FAILED else 0

        delivered = 0
        for event in session:
            if event.type is DrainEventType.DELIVERED:
                print(event.body, flush=True)
                delivered += 1
            elif event.type is DrainEventType.FAILED:
                logger.warning("Queue error: %s", event.error)

    logger.info("Drained %d message(s)", delivered)
    failed = session.result is not None and session.result.type is DrainEventType.FAILED
    return 1 if failed else 0


def cmd_purge(container: DependenciesContainer, args: argparse.Namespace) -> int:
    container.sqs_client().purge()
    return 0


def main():
    """Entry point with CLI argument parsing."""
    parser = argparse.ArgumentParser(description="Operate on the configured SQS queue")
    subparsers = parser.add_subparsers(dest="command", required=True)

    count = subparsers.add_parser("count", help="Print the approximate message count")
    count.set_defaults(func=cmd_count)

    send = subparsers.add_parser("send", help="Send one message per input line")
    send.add_argument("files", nargs="*", help="Input files (stdin if omitted)")
    send.add_argument("--batch", type=int, default=None, help="Messages per batch call")
    send.set_defaults(func=cmd_send)

    drain = subparsers.add_parser("drain", help="Print message bodies until the queue is empty")
    drain.add_argument("--max", type=int, default=0, help="Stop after this many messages")
    drain.add_argument("--batch", type=int, default=None, help="Messages per receive call")
    drain.add_argument("--wait", type=int, default=None, help="Long poll seconds")
    drain.add_argument("--delete", action="store_true", help="Delete messages once printed")
    drain.set_defaults(func=cmd_drain)

    purge = subparsers.add_parser("purge", help="Delete every message in the queue")
    purge.set_defaults(func=cmd_purge)

    args = parser.parse_args()

    container = DependenciesContainer()

    try:
        container.config().validate()
        sys.exit(args.func(container, args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(0)
    except (QueueError, ValueError) as e:
        logger.error("%s", e)
        sys.exit(1)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
