"""Export utilities: scan log, JSON summaries and device tables."""

from .inventory import export_devices_to_csv, export_devices_to_xlsx
from .logging import append_device_record, append_scan_completed, append_scan_result, read_scan_log
from .writers import export_json_document, export_scan_summary

__all__ = [
    "append_device_record",
    "append_scan_completed",
    "append_scan_result",
    "export_devices_to_csv",
    "export_devices_to_xlsx",
    "export_json_document",
    "export_scan_summary",
    "read_scan_log",
]
