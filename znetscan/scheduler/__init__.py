"""Recurring scan scheduling."""

from .jobs import build_scheduler, get_schedule_events, run_scheduled_scan, schedule_recurring_scan

__all__ = [
    "build_scheduler",
    "get_schedule_events",
    "run_scheduled_scan",
    "schedule_recurring_scan",
]
