"""SQLite-backed scan settings and scan history storage."""

from __future__ import annotations

from datetime import datetime, timezone
import json
from pathlib import Path
import sqlite3
from typing import Any

from znetscan.scanner.models import DEFAULT_MAX_WORKERS, ScanSettings
from znetscan.scanner.tcp_scanner import DEFAULT_PORTS, DEFAULT_TIMEOUT, candidate_ports

DB_PATH = Path.home() / ".znetscan" / "znetscan.db"


def _connect() -> sqlite3.Connection:
    DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(DB_PATH)
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS preferences (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
        """
    )
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS scan_history (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            scan_type TEXT NOT NULL,
            summary TEXT NOT NULL,
            created_at TEXT NOT NULL
        )
        """
    )
    return conn


def set_preference(key: str, value: Any) -> None:
    payload = json.dumps(value, ensure_ascii=False)
    stamp = datetime.now(timezone.utc).isoformat()
    with _connect() as conn:
        conn.execute(
            """
            INSERT INTO preferences(key, value, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at
            """,
            (key, payload, stamp),
        )


def get_preference(key: str, default: Any = None) -> Any:
    with _connect() as conn:
        row = conn.execute("SELECT value FROM preferences WHERE key = ?", (key,)).fetchone()
    if not row:
        return default
    try:
        return json.loads(str(row[0]))
    except json.JSONDecodeError:
        return default


def _positive_float(value: Any, default: float) -> float:
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default


def _positive_int(value: Any, default: int) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default


def _port_list(value: Any) -> tuple[int, ...]:
    if not isinstance(value, (list, tuple)):
        return DEFAULT_PORTS
    return candidate_ports(value)


def load_scan_settings() -> ScanSettings:
    """Read scan settings, falling back to defaults for missing or bad values."""
    return ScanSettings(
        timeout=_positive_float(get_preference("scan.timeout"), DEFAULT_TIMEOUT),
        max_workers=_positive_int(get_preference("scan.max_workers"), DEFAULT_MAX_WORKERS),
        ports=_port_list(get_preference("scan.ports")),
    )


def save_scan_settings(settings: ScanSettings) -> None:
    set_preference("scan.timeout", float(settings.timeout))
    set_preference("scan.max_workers", int(settings.max_workers))
    set_preference("scan.ports", [int(port) for port in settings.ports])


def record_scan_history(scan_type: str, summary: dict[str, Any]) -> None:
    stamp = datetime.now(timezone.utc).isoformat()
    with _connect() as conn:
        conn.execute(
            "INSERT INTO scan_history(scan_type, summary, created_at) VALUES (?, ?, ?)",
            (scan_type, json.dumps(summary, ensure_ascii=False), stamp),
        )


def list_scan_history(limit: int = 25) -> list[dict[str, Any]]:
    with _connect() as conn:
        rows = conn.execute(
            "SELECT scan_type, summary, created_at FROM scan_history ORDER BY id DESC LIMIT ?",
            (max(1, int(limit)),),
        ).fetchall()
    history: list[dict[str, Any]] = []
    for scan_type, summary, created_at in rows:
        try:
            decoded = json.loads(str(summary))
        except json.JSONDecodeError:
            decoded = {"raw": str(summary)}
        history.append({"scan_type": scan_type, "summary": decoded, "created_at": created_at})
    return history
