"""Console entrypoint: scan the local /24 and print discovered devices."""

from __future__ import annotations

import argparse
import logging
import sys
import threading
from typing import Sequence

from znetscan.errors import NoInterfaceFound
from znetscan.export import (
    append_device_record,
    append_scan_completed,
    export_devices_to_csv,
    export_devices_to_xlsx,
    export_scan_summary,
)
from znetscan.scanner import Device, ScanCallbacks, ScanCoordinator, ScanSummary, service_name
from znetscan.scheduler import build_scheduler, schedule_recurring_scan
from znetscan.storage import load_scan_settings, record_scan_history

logger = logging.getLogger(__name__)


def format_device(device: Device) -> list[str]:
    lines = [device.display_name(), f"  MAC Address: {device.link_layer_address}", "  Open Ports"]
    lines.extend(f"    Port {port} ({service_name(port)})" for port in device.open_ports)
    return lines


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="znetscan", description="Scan the local /24 subnet for devices")
    parser.add_argument("--timeout", type=float, help="Per-call network timeout in seconds")
    parser.add_argument("--workers", type=int, help="Size of the probe worker pool")
    parser.add_argument("--output", help="Write the scan summary as a JSON document")
    parser.add_argument("--csv", help="Write the discovered devices as CSV")
    parser.add_argument("--xlsx", help="Write the discovered devices as an Excel workbook")
    parser.add_argument("--log", help="Append discovered devices to a JSON-lines scan log")
    parser.add_argument("--every", type=float, metavar="MINUTES", help="Rescan every MINUTES until interrupted")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


class ConsoleReporter:
    """Prints scan events and persists results after each completed scan."""

    def __init__(self, args: argparse.Namespace) -> None:
        self.args = args
        self.last_progress = -1
        self.failed = False

    def callbacks(self) -> ScanCallbacks:
        return ScanCallbacks(
            on_progress=self.on_progress,
            on_device_found=self.on_device_found,
            on_scan_complete=self.on_scan_complete,
            on_fatal_error=self.on_fatal_error,
        )

    def on_progress(self, percent: int) -> None:
        if percent != self.last_progress and percent % 10 == 0:
            logger.info("Progress: %d%%", percent)
        self.last_progress = percent

    def on_device_found(self, device: Device) -> None:
        print("\n".join(format_device(device)), flush=True)
        if self.args.log:
            append_device_record(device, self.args.log)

    def on_scan_complete(self) -> None:
        self.last_progress = -1
        print("Scan completed!", flush=True)

    def on_fatal_error(self, exc: NoInterfaceFound) -> None:
        self.failed = True
        print(f"Error: {exc}", file=sys.stderr, flush=True)

    def persist(self, summary: ScanSummary) -> None:
        if self.args.log:
            append_scan_completed(summary, self.args.log)
        if summary.error is not None:
            return
        record_scan_history("subnet", {"subnet": summary.subnet, "device_count": len(summary.devices)})
        if self.args.output:
            export_scan_summary(summary, self.args.output)
        if self.args.csv:
            export_devices_to_csv(summary.devices, self.args.csv)
        if self.args.xlsx:
            export_devices_to_xlsx(summary.devices, self.args.xlsx)


def _run_recurring(coordinator: ScanCoordinator, reporter: ConsoleReporter, minutes: float) -> int:
    scheduler = build_scheduler()
    stop = threading.Event()
    schedule_recurring_scan(
        scheduler,
        coordinator,
        reporter.callbacks(),
        minutes=minutes,
        on_summary=reporter.persist,
    )
    scheduler.start()
    try:
        stop.wait()
    except KeyboardInterrupt:
        logger.info("Stopping scheduled scans")
    finally:
        scheduler.shutdown(wait=False)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Application entrypoint."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    settings = load_scan_settings()
    if args.timeout is not None and args.timeout > 0:
        settings.timeout = args.timeout
    if args.workers is not None and args.workers > 0:
        settings.max_workers = args.workers

    coordinator = ScanCoordinator(settings=settings)
    reporter = ConsoleReporter(args)

    if args.every:
        return _run_recurring(coordinator, reporter, args.every)

    summary = coordinator.run(reporter.callbacks())
    reporter.persist(summary)
    return 1 if reporter.failed else 0


if __name__ == "__main__":
    sys.exit(main())
