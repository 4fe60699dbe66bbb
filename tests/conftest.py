"""Shared fixtures: fake probes and an isolated preferences database."""

from __future__ import annotations

import threading

import pytest

from znetscan.scanner.models import Device, HardwareAddress
from znetscan.storage import preferences


@pytest.fixture(autouse=True)
def isolated_db(tmp_path, monkeypatch):
    """Point the preferences store at a per-test database."""
    db_path = tmp_path / "znetscan.db"
    monkeypatch.setattr(preferences, "DB_PATH", db_path)
    return db_path


def make_device(host: str, ports: tuple[int, ...] = ()) -> Device:
    return Device(
        address=host,
        hostname=f"host-{host.rsplit('.', 1)[-1]}",
        hardware_address=HardwareAddress.unknown("Host not directly reachable"),
        open_ports=ports,
    )


class FakeProbe:
    """Probe stand-in: hosts in ``reachable`` yield devices, ``failing`` raise."""

    def __init__(self, reachable=(), failing=(), ports=(80,)):
        self.reachable = set(reachable)
        self.failing = set(failing)
        self.ports = tuple(ports)
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def __call__(self, host, *, ports, timeout, on_log=None):
        with self._lock:
            self.calls.append(host)
        if host in self.failing:
            raise RuntimeError(f"probe blew up for {host}")
        if host in self.reachable:
            return make_device(host, self.ports)
        return None


@pytest.fixture
def fake_probe():
    return FakeProbe


@pytest.fixture
def device_factory():
    return make_device
