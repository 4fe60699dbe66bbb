"""Persistence helpers for scan settings and scan history."""

from .preferences import (
    ScanSettings,
    get_preference,
    list_scan_history,
    load_scan_settings,
    record_scan_history,
    save_scan_settings,
    set_preference,
)

__all__ = [
    "ScanSettings",
    "get_preference",
    "set_preference",
    "load_scan_settings",
    "save_scan_settings",
    "record_scan_history",
    "list_scan_history",
]
