"""
Run audit job consumers from CLI.

Optionally enqueue audit ids given on the command line (e.g. to reprocess
records left queued while the queue was disabled) and drain them once.
"""

from __future__ import annotations

import argparse
import json
import signal
import threading
import uuid

from app.logging_utils import configure_logging
from app.services.audit_runtime import build_audit_runtime


def main() -> int:
    parser = argparse.ArgumentParser(description="Run audit job consumers.")
    parser.add_argument(
        "audit_ids",
        nargs="*",
        type=uuid.UUID,
        help="Optional audit ids to enqueue before consuming.",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Process the given audit ids and exit instead of consuming forever.",
    )
    parser.add_argument(
        "--consumers",
        type=int,
        default=None,
        help="Number of consumer threads (defaults to AUDIT_QUEUE_CONSUMERS).",
    )
    args = parser.parse_args()

    configure_logging()
    runtime = build_audit_runtime()
    dispatcher = runtime.dispatcher

    for audit_id in args.audit_ids:
        dispatcher.submit(audit_id)

    if args.once:
        outcomes = []
        # Long enough for the slowest scheduled redelivery to land.
        retry_wait = runtime.queue_settings.delivery_backoff_seconds * (
            2 ** runtime.queue_settings.max_delivery_attempts
        ) + 1.0
        redeliveries_pending = 0
        while True:
            outcome = dispatcher.process_next(timeout=retry_wait if redeliveries_pending else None)
            if outcome is None:
                break
            if outcome.attempt > 1:
                redeliveries_pending -= 1
            if outcome.will_retry:
                redeliveries_pending += 1
            outcomes.append(
                {
                    "audit_id": str(outcome.audit_id),
                    "attempt": outcome.attempt,
                    "succeeded": outcome.succeeded,
                    "error": outcome.error,
                }
            )
        print(json.dumps(outcomes, indent=2))
        final_status = {item["audit_id"]: item["succeeded"] for item in outcomes}
        return 0 if all(final_status.values()) else 1

    stop_event = threading.Event()
    signal.signal(signal.SIGTERM, lambda *_: stop_event.set())
    signal.signal(signal.SIGINT, lambda *_: stop_event.set())

    dispatcher.start(consumers=args.consumers or runtime.queue_settings.consumers)
    stop_event.wait()
    dispatcher.stop(wait=True, timeout=30.0)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
