"""Device table exports (CSV / XLSX)."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

import pandas as pd

from znetscan.scanner.models import Device

COLUMNS = ["ip", "hostname", "mac", "mac_resolved", "open_ports", "services"]


def devices_to_frame(devices: Iterable[Device]) -> pd.DataFrame:
    """One row per device; port and service lists are joined with commas."""
    rows = []
    for device in devices:
        record = device.to_record()
        record["open_ports"] = ",".join(str(port) for port in record["open_ports"])
        record["services"] = ",".join(record["services"])
        rows.append(record)
    return pd.DataFrame(rows, columns=COLUMNS)


def export_devices_to_csv(devices: Iterable[Device], output_path: str | Path) -> Path:
    target = Path(output_path)
    target.parent.mkdir(parents=True, exist_ok=True)
    devices_to_frame(devices).to_csv(target, index=False)
    return target


def export_devices_to_xlsx(devices: Iterable[Device], output_path: str | Path) -> Path:
    target = Path(output_path)
    target.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(target) as writer:
        devices_to_frame(devices).to_excel(writer, sheet_name="devices", index=False)
    return target
