"""TCP connect probes for the fixed well-known port list."""

from __future__ import annotations

import socket
from typing import Iterable, Sequence

# Scan order is part of the output contract: open ports are reported in this order.
DEFAULT_PORTS: tuple[int, ...] = (80, 443, 22, 21, 3389, 8080, 1723)

SERVICE_NAMES = {
    80: "HTTP",
    443: "HTTPS",
    22: "SSH",
    21: "FTP",
    3389: "RDP",
    8080: "HTTP-Proxy",
    1723: "PPTP",
}

DEFAULT_TIMEOUT = 1.0


def service_name(port: int) -> str:
    return SERVICE_NAMES.get(int(port), "Unknown")


def candidate_ports(ports: Iterable[int]) -> tuple[int, ...]:
    """Keep only candidate ports, in declared order; all candidates when none remain."""
    wanted = set()
    for port in ports:
        try:
            wanted.add(int(port))
        except (TypeError, ValueError):
            continue
    selected = tuple(port for port in DEFAULT_PORTS if port in wanted)
    return selected or DEFAULT_PORTS


def is_port_open(host: str, port: int, timeout: float = DEFAULT_TIMEOUT) -> bool:
    """Attempt a TCP connect; any failure counts as closed."""
    if port < 0 or port > 65535:
        return False
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            sock.settimeout(timeout)
            sock.connect((host, port))
        return True
    except OSError:
        return False


def scan_ports(
    host: str,
    ports: Sequence[int] = DEFAULT_PORTS,
    timeout: float = DEFAULT_TIMEOUT,
) -> list[int]:
    """Return the candidate ports accepting connections, in declared order."""
    return [port for port in candidate_ports(ports) if is_port_open(host, port, timeout)]
