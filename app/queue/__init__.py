"""
app/queue package marker.
"""

from app.queue.dispatcher import (
    AuditJob,
    AuditJobDispatcher,
    DispatcherClosedError,
    JobOutcome,
    NonRetryableJobError,
)

__all__ = [
    "AuditJob",
    "AuditJobDispatcher",
    "DispatcherClosedError",
    "JobOutcome",
    "NonRetryableJobError",
]
