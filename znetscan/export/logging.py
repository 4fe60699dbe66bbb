"""Append-only JSON scan log."""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timezone
import json
from pathlib import Path
import threading
from typing import Any, Iterator

from znetscan.scanner.models import Device, ScanSummary

DEFAULT_LOG_PATH = "znetscan_scan_log.jsonl"

_APPEND_LOCK = threading.Lock()


@contextmanager
def _advisory_file_lock(path: Path) -> Iterator[None]:
    """Hold an exclusive advisory lock on ``<path>.lock`` where the OS offers one."""
    lock_path = path.with_suffix(path.suffix + ".lock")
    lock_path.parent.mkdir(parents=True, exist_ok=True)

    with lock_path.open("a+", encoding="utf-8") as lock_file:
        try:
            import fcntl  # type: ignore
        except ModuleNotFoundError:
            fcntl = None  # type: ignore[assignment]

        if fcntl is not None:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)
            return

        try:
            import msvcrt  # type: ignore
        except ModuleNotFoundError:
            # Process-level lock only.
            yield
            return

        msvcrt.locking(lock_file.fileno(), msvcrt.LK_LOCK, 1)
        try:
            yield
        finally:
            msvcrt.locking(lock_file.fileno(), msvcrt.LK_UNLCK, 1)


def _with_timestamp(record: dict[str, Any]) -> dict[str, Any]:
    payload = dict(record)
    payload.setdefault("timestamp", datetime.now(timezone.utc).isoformat())
    return payload


def append_scan_result(record: dict[str, Any], path: str | Path = DEFAULT_LOG_PATH) -> Path:
    """Append one timestamped record to the JSON-lines scan log."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    payload = _with_timestamp(record)

    with _APPEND_LOCK, _advisory_file_lock(target):
        with target.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(payload, ensure_ascii=False) + "\n")
    return target


def append_device_record(device: Device, path: str | Path = DEFAULT_LOG_PATH, *, subnet: str = "") -> Path:
    payload = device.to_record()
    payload["kind"] = "device_found"
    if subnet:
        payload["subnet"] = subnet
    return append_scan_result(payload, path=path)


def append_scan_completed(summary: ScanSummary, path: str | Path = DEFAULT_LOG_PATH) -> Path:
    payload = {
        "kind": "scan_completed" if summary.error is None else "scan_failed",
        "subnet": summary.subnet,
        "local_address": summary.local_address,
        "device_count": len(summary.devices),
        "completed": summary.completed,
        "error": summary.error,
    }
    return append_scan_result(payload, path=path)


def read_scan_log(path: str | Path = DEFAULT_LOG_PATH) -> list[dict[str, Any]]:
    """Load every well-formed record of a scan log; malformed lines are skipped."""
    target = Path(path)
    if not target.exists():
        return []
    records: list[dict[str, Any]] = []
    with target.open("r", encoding="utf-8") as handle:
        for line in handle:
            line = line.strip()
            if not line:
                continue
            try:
                decoded = json.loads(line)
            except json.JSONDecodeError:
                continue
            if isinstance(decoded, dict):
                records.append(decoded)
    return records
