"""Per-host probe: reachability, hostname, hardware address and open ports."""

from __future__ import annotations

import logging
import platform
import re
import socket
import subprocess
from typing import Callable, Sequence

import psutil

from .ip_utils import to_ipv4_address
from .models import (
    CANNOT_RETRIEVE_MAC,
    HOST_NOT_FOUND,
    INTERFACE_ERROR,
    NOT_DIRECTLY_REACHABLE,
    Device,
    HardwareAddress,
)
from .tcp_scanner import DEFAULT_PORTS, DEFAULT_TIMEOUT, scan_ports

logger = logging.getLogger(__name__)

# Fallback reachability probe when no ping binary is available.
ECHO_PORT = 7

_EMPTY_MAC = "000000000000"


def normalize_mac(value: str | None) -> str:
    """Render a MAC address as dash separated upper-case octets."""
    if not value:
        return ""
    compact = re.sub(r"[^0-9A-Fa-f]", "", value)
    if len(compact) != 12:
        return value.upper().strip()
    return "-".join(compact[index : index + 2] for index in range(0, 12, 2)).upper()


def _ping_command(host: str, timeout: float) -> list[str]:
    """Build a one-echo ping whose own wait matches ``timeout``."""
    system = platform.system().lower()
    millis = str(max(1, int(timeout * 1000)))
    if "windows" in system:
        return ["ping", "-n", "1", "-w", millis, host]
    if system == "darwin" or system.endswith("bsd"):
        # BSD ping takes -W in milliseconds.
        return ["ping", "-c", "1", "-W", millis, host]
    # iputils ping accepts fractional seconds.
    return ["ping", "-c", "1", "-W", f"{max(timeout, 0.001):g}", host]


def _tcp_echo_reachable(host: str, timeout: float) -> bool:
    try:
        with socket.create_connection((host, ECHO_PORT), timeout=timeout):
            return True
    except ConnectionRefusedError:
        # A reset still proves the host answered.
        return True
    except OSError:
        return False


def is_reachable(host: str, timeout: float = DEFAULT_TIMEOUT) -> bool:
    """Send a single echo request and report whether the host answered."""
    try:
        proc = subprocess.run(
            _ping_command(host, timeout),
            check=False,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        return False
    except FileNotFoundError:
        return _tcp_echo_reachable(host, timeout)
    return proc.returncode == 0


def resolve_hostname(host: str) -> str:
    """Reverse-resolve ``host``; the IP literal stands in on failure."""
    try:
        name = socket.gethostbyaddr(host)[0]
    except (socket.herror, socket.gaierror, OSError):
        return host
    return name or host


def _link_family() -> int:
    return getattr(psutil, "AF_LINK", getattr(socket, "AF_PACKET", -1))


def resolve_hardware_address(host: str) -> HardwareAddress:
    """Find the MAC of the local interface bound to ``host``.

    Only addresses owned by this machine map to an interface, so hosts
    elsewhere on the segment report ``Host not directly reachable``.
    """
    if to_ipv4_address(host) is None:
        return HardwareAddress.unknown(HOST_NOT_FOUND)

    try:
        interfaces = psutil.net_if_addrs()
    except OSError:
        return HardwareAddress.unknown(INTERFACE_ERROR)
    except Exception as exc:  # noqa: BLE001
        return HardwareAddress.from_error(exc)

    try:
        for addrs in interfaces.values():
            if not any(addr.family == socket.AF_INET and addr.address == host for addr in addrs):
                continue
            for addr in addrs:
                if addr.family != _link_family():
                    continue
                mac = normalize_mac(addr.address)
                if mac and re.sub(r"[^0-9A-F]", "", mac) != _EMPTY_MAC:
                    return HardwareAddress.resolved(mac)
            return HardwareAddress.unknown(CANNOT_RETRIEVE_MAC)
    except Exception as exc:  # noqa: BLE001
        return HardwareAddress.from_error(exc)
    return HardwareAddress.unknown(NOT_DIRECTLY_REACHABLE)


def probe_host(
    host: str,
    *,
    ports: Sequence[int] = DEFAULT_PORTS,
    timeout: float = DEFAULT_TIMEOUT,
    on_log: Callable[[str], None] | None = None,
) -> Device | None:
    """Run the full probe for one address; ``None`` means no device."""
    try:
        if not is_reachable(host, timeout):
            return None
    except OSError as exc:
        message = f"Error scanning {host}: {exc}"
        logger.debug(message)
        if on_log:
            on_log(message)
        return None

    return Device(
        address=host,
        hostname=resolve_hostname(host),
        hardware_address=resolve_hardware_address(host),
        open_ports=tuple(scan_ports(host, ports, timeout)),
    )
