"""Device records produced by host probes and consumed by the scan stream."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .tcp_scanner import DEFAULT_PORTS, DEFAULT_TIMEOUT, candidate_ports, service_name

NOT_DIRECTLY_REACHABLE = "Host not directly reachable"
CANNOT_RETRIEVE_MAC = "Cannot retrieve MAC"
HOST_NOT_FOUND = "Host not found"
INTERFACE_ERROR = "Network interface error"

# One worker per candidate host of a /24.
DEFAULT_MAX_WORKERS = 255


@dataclass(frozen=True, slots=True)
class HardwareAddress:
    """Resolved MAC address, or the reason it could not be resolved."""

    mac: str | None = None
    reason: str | None = None

    @classmethod
    def resolved(cls, mac: str) -> HardwareAddress:
        return cls(mac=mac)

    @classmethod
    def unknown(cls, reason: str) -> HardwareAddress:
        return cls(reason=reason)

    @classmethod
    def from_error(cls, exc: BaseException) -> HardwareAddress:
        return cls(reason=f"Error: {exc}")

    @property
    def is_known(self) -> bool:
        return self.mac is not None

    def __str__(self) -> str:
        if self.mac is not None:
            return self.mac
        return f"Unknown ({self.reason or 'Unavailable'})"


@dataclass(frozen=True, slots=True)
class Device:
    """A reachable host, fully populated once by the host probe."""

    address: str
    hostname: str
    hardware_address: HardwareAddress
    open_ports: tuple[int, ...] = field(default_factory=tuple)

    @property
    def link_layer_address(self) -> str:
        return str(self.hardware_address)

    def display_name(self) -> str:
        if not self.hostname or self.hostname == self.address:
            return self.address
        return f"{self.address} ({self.hostname})"

    def to_record(self) -> dict[str, Any]:
        """Flatten into a JSON/CSV friendly dict."""
        return {
            "ip": self.address,
            "hostname": self.hostname,
            "mac": self.link_layer_address,
            "mac_resolved": self.hardware_address.is_known,
            "open_ports": list(self.open_ports),
            "services": [service_name(port) for port in self.open_ports],
        }


@dataclass(frozen=True, slots=True)
class ScanEvent:
    """One probe completion: current progress plus the device, if any."""

    progress: int
    device: Device | None = None


@dataclass(slots=True)
class ScanSummary:
    """Aggregate outcome of a full subnet scan."""

    local_address: str = ""
    subnet: str = ""
    devices: list[Device] = field(default_factory=list)
    completed: int = 0
    started_at: str = ""
    finished_at: str = ""
    error: str | None = None

    def to_record(self) -> dict[str, Any]:
        return {
            "local_address": self.local_address,
            "subnet": self.subnet,
            "device_count": len(self.devices),
            "completed": self.completed,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "error": self.error,
            "devices": [device.to_record() for device in self.devices],
        }


@dataclass(slots=True)
class ScanSettings:
    """Tunables shared by every probe of a scan."""

    timeout: float = DEFAULT_TIMEOUT
    max_workers: int = DEFAULT_MAX_WORKERS
    ports: tuple[int, ...] = DEFAULT_PORTS

    def __post_init__(self) -> None:
        self.ports = candidate_ports(self.ports)
