"""Tests for the scan log and export writers."""

import json

import pandas as pd

from znetscan.export import (
    append_device_record,
    append_scan_completed,
    export_devices_to_csv,
    export_devices_to_xlsx,
    export_scan_summary,
    read_scan_log,
)
from znetscan.scanner.models import ScanSummary


def test_scan_log_appends_json_lines(tmp_path, device_factory):
    log_path = tmp_path / "logs" / "scan.jsonl"
    append_device_record(device_factory("10.0.0.4", (80, 22)), log_path, subnet="10.0.0.0/24")
    append_device_record(device_factory("10.0.0.7"), log_path)

    lines = log_path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    first = json.loads(lines[0])
    assert first["kind"] == "device_found"
    assert first["ip"] == "10.0.0.4"
    assert first["open_ports"] == [80, 22]
    assert first["subnet"] == "10.0.0.0/24"
    assert "timestamp" in first


def test_read_scan_log_skips_malformed_lines(tmp_path, device_factory):
    log_path = tmp_path / "scan.jsonl"
    append_device_record(device_factory("10.0.0.4"), log_path)
    with log_path.open("a", encoding="utf-8") as handle:
        handle.write("{not json\n\n")
    append_scan_completed(ScanSummary(subnet="10.0.0.0/24", completed=254), log_path)

    records = read_scan_log(log_path)
    assert [record["kind"] for record in records] == ["device_found", "scan_completed"]
    assert read_scan_log(tmp_path / "missing.jsonl") == []


def test_failed_scan_is_logged_as_failure(tmp_path):
    log_path = tmp_path / "scan.jsonl"
    append_scan_completed(ScanSummary(error="No network interface found"), log_path)
    assert read_scan_log(log_path)[0]["kind"] == "scan_failed"


def test_summary_document(tmp_path, device_factory):
    summary = ScanSummary(local_address="10.0.0.9", subnet="10.0.0.0/24", completed=254)
    summary.devices.append(device_factory("10.0.0.4", (443,)))

    target = export_scan_summary(summary, tmp_path / "out" / "summary.json")
    payload = json.loads(target.read_text(encoding="utf-8"))
    assert payload["subnet"] == "10.0.0.0/24"
    assert payload["devices"][0]["ip"] == "10.0.0.4"


def test_device_csv(tmp_path, device_factory):
    devices = [device_factory("10.0.0.4", (80, 22)), device_factory("10.0.0.5")]
    target = export_devices_to_csv(devices, tmp_path / "devices.csv")

    frame = pd.read_csv(target, dtype=str, keep_default_na=False)
    assert list(frame["ip"]) == ["10.0.0.4", "10.0.0.5"]
    assert list(frame["open_ports"]) == ["80,22", ""]
    assert list(frame["services"]) == ["HTTP,SSH", ""]


def test_device_workbook(tmp_path, device_factory):
    devices = [device_factory("10.0.0.4", (80, 22)), device_factory("10.0.0.5")]
    target = export_devices_to_xlsx(devices, tmp_path / "devices.xlsx")

    frame = pd.read_excel(target, sheet_name="devices", dtype=str, keep_default_na=False)
    assert list(frame["ip"]) == ["10.0.0.4", "10.0.0.5"]
    assert list(frame["hostname"]) == ["host-4", "host-5"]
    assert list(frame["open_ports"]) == ["80,22", ""]
