"""Recurring subnet scans and their run metadata."""

from __future__ import annotations

from collections import deque
from datetime import datetime, timezone
from threading import Lock
from typing import Any, Callable

from apscheduler.schedulers.background import BackgroundScheduler

from znetscan.errors import ScanInProgress
from znetscan.scanner.engine import ScanCallbacks, ScanCoordinator
from znetscan.scanner.models import ScanSummary

SUBNET_SCAN_JOB_ID = "subnet-scan"

MAX_SCHEDULE_EVENTS = 500

# Oldest events drop off once the cap is reached.
_JOB_EVENTS: deque[dict[str, Any]] = deque(maxlen=MAX_SCHEDULE_EVENTS)
_JOB_EVENTS_LOCK = Lock()


def build_scheduler() -> BackgroundScheduler:
    """Create and return a background scheduler instance."""
    return BackgroundScheduler()


def log_schedule_event(
    *,
    action: str,
    job_id: str,
    source: str = "scheduler",
    metadata: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Record one scheduler action (run, skip, failure)."""
    event = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "action": action,
        "job_id": job_id,
        "source": source,
        "metadata": dict(metadata or {}),
    }
    with _JOB_EVENTS_LOCK:
        _JOB_EVENTS.append(event)
    return event


def get_schedule_events(*, job_id: str | None = None) -> list[dict[str, Any]]:
    """Return a snapshot of recorded scheduler events."""
    with _JOB_EVENTS_LOCK:
        items = list(_JOB_EVENTS)
    if job_id:
        return [event for event in items if str(event.get("job_id")) == job_id]
    return items


def clear_schedule_events() -> None:
    with _JOB_EVENTS_LOCK:
        _JOB_EVENTS.clear()


def run_scheduled_scan(
    coordinator: ScanCoordinator,
    callbacks: ScanCallbacks | None = None,
    *,
    job_id: str = SUBNET_SCAN_JOB_ID,
    on_summary: Callable[[ScanSummary], None] | None = None,
) -> None:
    """Run one scan for the scheduler, skipping if a scan is still active."""
    try:
        summary = coordinator.run(callbacks)
    except ScanInProgress:
        log_schedule_event(action="skipped", job_id=job_id, metadata={"reason": "scan in progress"})
        return
    if on_summary:
        on_summary(summary)
    action = "completed" if summary.error is None else "failed"
    log_schedule_event(
        action=action,
        job_id=job_id,
        metadata={
            "subnet": summary.subnet,
            "device_count": len(summary.devices),
            "error": summary.error,
        },
    )


def schedule_recurring_scan(
    scheduler: BackgroundScheduler,
    coordinator: ScanCoordinator,
    callbacks: ScanCallbacks | None = None,
    *,
    minutes: float,
    job_id: str = SUBNET_SCAN_JOB_ID,
    on_summary: Callable[[ScanSummary], None] | None = None,
) -> Any:
    """Add an interval job that rescans the subnet every ``minutes``.

    ``max_instances=1`` keeps runs of the job from overlapping; missed runs
    are coalesced into one.
    """
    if minutes <= 0:
        raise ValueError("minutes must be positive")
    job = scheduler.add_job(
        run_scheduled_scan,
        "interval",
        minutes=minutes,
        args=[coordinator, callbacks],
        kwargs={"job_id": job_id, "on_summary": on_summary},
        id=job_id,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        next_run_time=datetime.now(timezone.utc),
    )
    log_schedule_event(action="scheduled", job_id=job_id, metadata={"minutes": minutes})
    return job
