"""Drain an SQS queue into an event queue on a background thread."""

import logging
import queue
import threading
from typing import Any, Callable, Iterator

from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    stop_when_event_set,
    wait_exponential,
)

from aws_toolkit.infrastructure.sqs_client import SQSClient
from aws_toolkit.models.errors import QueueError, TransientQueueError
from aws_toolkit.models.schemas import DrainEvent, DrainRequest

logger = logging.getLogger(__name__)


class _Cancelled(Exception):
    """Raised inside a retried call when the session was cancelled."""


class DrainSession:
    """Handle on a running drain: its event queue, cancel flag and thread."""

    def __init__(
        self,
        events: queue.Queue,
        cancel: threading.Event,
        poll_interval: float = 0.5,
    ):
        self.events = events
        self.cancel = cancel
        self.thread: threading.Thread | None = None
        self.result: DrainEvent | None = None
        self._poll_interval = poll_interval

    @property
    def running(self) -> bool:
        return self.thread is not None and self.thread.is_alive()

    def __iter__(self) -> Iterator[DrainEvent]:
        """Yield events until a terminal one, or until the producer stops."""
        while True:
            try:
                event = self.events.get(timeout=self._poll_interval)
            except queue.Empty:
                if not self.running and self.events.empty():
                    return
                continue

            yield event
            if event.terminal:
                return

    def stop(self, timeout: float | None = None) -> None:
        """Cancel the drain and wait for the producer thread to exit."""
        self.cancel.set()
        if self.thread is not None:
            self.thread.join(timeout)

    def __enter__(self) -> "DrainSession":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.stop()


class QueueDrainer:
    """Pulls messages from a queue and publishes them as DrainEvents."""

    def __init__(
        self,
        sqs_client: SQSClient,
        max_attempts: int = 3,
        backoff_multiplier: float = 1.0,
        backoff_max: float = 10.0,
        poll_interval: float = 0.5,
    ):
        """
        Initialize the drainer.

        Args:
            sqs_client: Wrapper bound to the queue to drain.
            max_attempts: Consecutive failures of a count or receive call
                before the session ends with a terminal FAILED event.
            backoff_multiplier: Exponential backoff multiplier in seconds.
            backoff_max: Upper bound of a single backoff wait in seconds.
            poll_interval: How often blocked publishes re-check cancellation.
        """
        self._sqs_client = sqs_client
        self._max_attempts = max_attempts
        self._backoff_multiplier = backoff_multiplier
        self._backoff_max = backoff_max
        self._poll_interval = poll_interval

    def start(self, request: DrainRequest | None = None, maxsize: int = 0) -> DrainSession:
        """
        Start draining on a daemon thread.

        Args:
            request: Drain options.
            maxsize: Capacity of the event queue, 0 for unbounded.

        Returns:
            The running DrainSession.
        """
        request = request or DrainRequest()
        session = DrainSession(
            events=queue.Queue(maxsize=maxsize),
            cancel=threading.Event(),
            poll_interval=self._poll_interval,
        )
        session.thread = threading.Thread(
            target=self._run,
            args=(session, request),
            name=f"drain-{self._sqs_client.queue_name}",
            daemon=True,
        )
        session.thread.start()
        return session

    def _run(self, session: DrainSession, request: DrainRequest) -> None:
        try:
            session.result = self.drain(session.events, request, session.cancel)
        except Exception as e:
            logger.exception("Drain of %s crashed", self._sqs_client.queue_name)
            event = DrainEvent.failed(e, terminal=True)
            if self._publish(session.events, event, session.cancel):
                session.result = event

    def drain(
        self,
        output: queue.Queue,
        request: DrainRequest | None = None,
        cancel: threading.Event | None = None,
    ) -> DrainEvent | None:
        """
        Drain the queue on the calling thread.

        Args:
            output: Queue receiving the events.
            request: Drain options.
            cancel: Event that stops the drain when set.

        Returns:
            The terminal event published, or None if the drain was cancelled.
        """
        request = request or DrainRequest()
        cancel = cancel or threading.Event()
        delivered = 0

        logger.info(
            "Draining %s (max=%d, batch=%d, wait=%ds)",
            self._sqs_client.queue_name,
            request.max_messages,
            request.batch_size,
            request.wait_seconds,
        )

        while not cancel.is_set():
            try:
                remaining = self._call(self._sqs_client.approximate_count, output, cancel)
                logger.debug("Remaining messages: %d", remaining)
                if remaining == 0:
                    return self._finish(output, DrainEvent.exhausted(), cancel, delivered)

                batch_size = request.batch_size
                if request.max_messages:
                    batch_size = min(batch_size, request.max_messages - delivered)

                messages = self._call(
                    lambda: self._sqs_client.receive_messages(
                        batch_size=batch_size,
                        wait_seconds=request.wait_seconds,
                        visibility_timeout=request.visibility_timeout,
                    ),
                    output,
                    cancel,
                )
            except _Cancelled:
                break
            except QueueError as e:
                return self._fail(output, e, cancel, delivered)

            for message in messages:
                if not self._publish(output, DrainEvent.delivered(message), cancel):
                    break
                delivered += 1
                if request.max_messages and delivered >= request.max_messages:
                    return self._finish(output, DrainEvent.quota_reached(), cancel, delivered)

        logger.info(
            "Drain of %s cancelled after %d message(s)",
            self._sqs_client.queue_name,
            delivered,
        )
        return None

    def _call(
        self,
        fn: Callable[[], Any],
        output: queue.Queue,
        cancel: threading.Event,
    ) -> Any:
        """Run fn with bounded exponential backoff, reporting each failure."""

        def attempt() -> Any:
            if cancel.is_set():
                raise _Cancelled()
            return fn()

        def report(retry_state: Any) -> None:
            error = retry_state.outcome.exception()
            logger.warning(
                "Attempt %d failed: %s", retry_state.attempt_number, error
            )
            self._publish(output, DrainEvent.failed(error), cancel)

        retrying = Retrying(
            stop=stop_after_attempt(self._max_attempts) | stop_when_event_set(cancel),
            wait=wait_exponential(
                multiplier=self._backoff_multiplier, max=self._backoff_max
            ),
            retry=retry_if_exception_type(TransientQueueError),
            before_sleep=report,
            sleep=cancel.wait,
            reraise=True,
        )
        return retrying(attempt)

    def _publish(
        self,
        output: queue.Queue,
        event: DrainEvent,
        cancel: threading.Event,
    ) -> bool:
        """Put event on output, giving up once cancel is set."""
        while not cancel.is_set():
            try:
                output.put(event, timeout=self._poll_interval)
                return True
            except queue.Full:
                continue
        return False

    def _finish(
        self,
        output: queue.Queue,
        event: DrainEvent,
        cancel: threading.Event,
        delivered: int,
    ) -> DrainEvent | None:
        if not self._publish(output, event, cancel):
            return None
        logger.info(
            "Drain of %s finished (%s) after %d message(s)",
            self._sqs_client.queue_name,
            event.type.value,
            delivered,
        )
        return event

    def _fail(
        self,
        output: queue.Queue,
        error: Exception,
        cancel: threading.Event,
        delivered: int,
    ) -> DrainEvent | None:
        if cancel.is_set():
            return None
        logger.error(
            "Drain of %s stopped after %d message(s): %s",
            self._sqs_client.queue_name,
            delivered,
            error,
        )
        return self._finish(output, DrainEvent.failed(error, terminal=True), cancel, delivered)
