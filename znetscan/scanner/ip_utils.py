"""Local interface lookup and /24 subnet enumeration."""

from __future__ import annotations

import ipaddress
import socket

import psutil

from znetscan.errors import NoInterfaceFound

HOSTS_PER_SUBNET = 254


def to_ipv4_address(value: str) -> ipaddress.IPv4Address | None:
    """Convert a host value to an ``IPv4Address`` when possible."""
    if not value:
        return None
    try:
        ip_obj = ipaddress.ip_address(value.strip())
    except ValueError:
        return None
    return ip_obj if isinstance(ip_obj, ipaddress.IPv4Address) else None


def _interface_is_loopback(name: str, stats: object, addrs: list) -> bool:
    flags = str(getattr(stats, "flags", "") or "")
    if "loopback" in flags.split(","):
        return True
    for addr in addrs:
        if getattr(addr, "family", None) != socket.AF_INET:
            continue
        ip_obj = to_ipv4_address(addr.address)
        if ip_obj and ip_obj.is_loopback:
            return True
    return name.lower() in {"lo", "lo0"}


def local_ipv4_address() -> str:
    """Return the first IPv4 address of the first up, non-loopback interface."""
    stats_by_name = psutil.net_if_stats()
    for name, addrs in psutil.net_if_addrs().items():
        stats = stats_by_name.get(name)
        if stats is None or not stats.isup:
            continue
        if _interface_is_loopback(name, stats, addrs):
            continue
        for addr in addrs:
            if getattr(addr, "family", None) != socket.AF_INET:
                continue
            if to_ipv4_address(addr.address):
                return str(addr.address)
    raise NoInterfaceFound("No network interface found")


def subnet_prefix(address: str) -> str:
    """``192.168.1.37`` -> ``192.168.1.``"""
    ip_obj = to_ipv4_address(address)
    if ip_obj is None:
        raise ValueError(f"not an IPv4 address: {address!r}")
    octets = str(ip_obj).split(".")
    return ".".join(octets[:3]) + "."


def subnet_cidr(address: str) -> str:
    return f"{subnet_prefix(address)}0/24"


def enumerate_subnet(address: str) -> list[str]:
    """List the 254 host addresses of the /24 containing ``address``."""
    prefix = subnet_prefix(address)
    return [f"{prefix}{host}" for host in range(1, HOSTS_PER_SUBNET + 1)]
