"""
app/queue/dispatcher.py

In-process audit job queue with consumer threads and delivery bookkeeping.

Delivery is at-least-once: a job whose handler raises is redelivered with
exponential backoff until ``max_delivery_attempts`` is reached, unless the
error is a ``NonRetryableJobError``. Handlers must therefore tolerate seeing
the same audit id twice.
"""

from __future__ import annotations

import logging
import queue
import threading
import uuid
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone

from app.logging_utils import log_event

logger = logging.getLogger(__name__)

AuditJobHandler = Callable[[uuid.UUID], None]


class NonRetryableJobError(Exception):
    """
    Raised by a handler when redelivering the job cannot help.
    """


class DispatcherClosedError(RuntimeError):
    """
    Raised when submitting to a dispatcher that has been stopped.
    """


@dataclass
class AuditJob:
    audit_id: uuid.UUID
    job_id: uuid.UUID = field(default_factory=uuid.uuid4)
    attempt: int = 0
    enqueued_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class JobOutcome:
    """
    Result of one delivery of one job.
    """

    job_id: uuid.UUID
    audit_id: uuid.UUID
    attempt: int
    succeeded: bool
    error: str | None = None
    will_retry: bool = False


class AuditJobDispatcher:
    """
    Queues audit ids and runs them through a handler on consumer threads.

    Each delivered job is handled end-to-end by exactly one consumer.
    """

    def __init__(
        self,
        *,
        handler: AuditJobHandler,
        max_delivery_attempts: int = 2,
        delivery_backoff_seconds: float = 5.0,
        history_size: int = 200,
    ) -> None:
        self._handler = handler
        self._max_delivery_attempts = max(1, max_delivery_attempts)
        self._delivery_backoff_seconds = max(0.0, delivery_backoff_seconds)
        self._queue: queue.Queue[AuditJob] = queue.Queue()
        self._outcomes: deque[JobOutcome] = deque(maxlen=max(1, history_size))
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._consumers: list[threading.Thread] = []
        self._pending_redeliveries: set[threading.Timer] = set()

    @property
    def pending_jobs(self) -> int:
        return self._queue.qsize()

    @property
    def is_running(self) -> bool:
        return any(thread.is_alive() for thread in self._consumers)

    def recent_outcomes(self) -> list[JobOutcome]:
        with self._lock:
            return list(self._outcomes)

    def submit(self, audit_id: uuid.UUID) -> AuditJob:
        """
        Enqueue one unit of work for ``audit_id``.
        """

        if self._stop_event.is_set():
            raise DispatcherClosedError("Audit dispatcher is stopped; job not accepted.")
        job = AuditJob(audit_id=audit_id)
        self._queue.put(job)
        log_event(logger, logging.INFO, "audit_job_enqueued", job_id=job.job_id, audit_id=audit_id)
        return job

    def process_next(self, timeout: float | None = None) -> JobOutcome | None:
        """
        Deliver at most one job to the handler; None when the queue stayed empty.
        """

        try:
            job = self._queue.get(timeout=timeout) if timeout is not None else self._queue.get_nowait()
        except queue.Empty:
            return None

        try:
            return self._deliver(job)
        finally:
            self._queue.task_done()

    def consume(
        self,
        *,
        stop_event: threading.Event | None = None,
        poll_interval_seconds: float = 0.5,
    ) -> None:
        """
        Long-lived consumer loop; returns once a stop is requested.
        """

        stop = stop_event or self._stop_event
        while not stop.is_set():
            self.process_next(timeout=poll_interval_seconds)

    def start(self, consumers: int = 1) -> None:
        if self.is_running:
            return
        self._stop_event.clear()
        self._consumers = [
            threading.Thread(
                target=self.consume,
                name=f"audit-consumer-{index}",
                daemon=True,
            )
            for index in range(max(1, consumers))
        ]
        for thread in self._consumers:
            thread.start()
        logger.info("Audit dispatcher started consumers=%d", len(self._consumers))

    def stop(self, *, wait: bool = True, timeout: float | None = None) -> None:
        self._stop_event.set()
        with self._lock:
            timers = list(self._pending_redeliveries)
            self._pending_redeliveries.clear()
        for timer in timers:
            timer.cancel()
        if wait:
            for thread in self._consumers:
                thread.join(timeout=timeout)
        logger.info("Audit dispatcher stopped")

    def _deliver(self, job: AuditJob) -> JobOutcome:
        job.attempt += 1
        log_event(
            logger,
            logging.INFO,
            "audit_job_started",
            job_id=job.job_id,
            audit_id=job.audit_id,
            attempt=job.attempt,
        )
        try:
            self._handler(job.audit_id)
        except Exception as exc:  # noqa: BLE001
            retryable = not isinstance(exc, NonRetryableJobError)
            will_retry = retryable and job.attempt < self._max_delivery_attempts
            outcome = JobOutcome(
                job_id=job.job_id,
                audit_id=job.audit_id,
                attempt=job.attempt,
                succeeded=False,
                error=f"{type(exc).__name__}: {exc}",
                will_retry=will_retry,
            )
            logger.error(
                "Audit job failed job_id=%s audit_id=%s attempt=%d/%d will_retry=%s error=%s",
                job.job_id,
                job.audit_id,
                job.attempt,
                self._max_delivery_attempts,
                will_retry,
                outcome.error,
            )
            if will_retry:
                self._schedule_redelivery(job)
        else:
            outcome = JobOutcome(
                job_id=job.job_id,
                audit_id=job.audit_id,
                attempt=job.attempt,
                succeeded=True,
            )
            log_event(
                logger,
                logging.INFO,
                "audit_job_completed",
                job_id=job.job_id,
                audit_id=job.audit_id,
                attempt=job.attempt,
            )

        with self._lock:
            self._outcomes.append(outcome)
        return outcome

    def _schedule_redelivery(self, job: AuditJob) -> None:
        delay = self._delivery_backoff_seconds * (2 ** (job.attempt - 1))
        if delay <= 0:
            self._queue.put(job)
            return

        def _requeue() -> None:
            with self._lock:
                self._pending_redeliveries.discard(timer)
            if not self._stop_event.is_set():
                self._queue.put(job)

        timer = threading.Timer(delay, _requeue)
        timer.daemon = True
        with self._lock:
            self._pending_redeliveries.add(timer)
        timer.start()
