"""Scanner package: subnet enumeration, host probes and the threaded scan coordinator."""

from .engine import ScanCallbacks, ScanCoordinator, ScanJob
from .ip_utils import enumerate_subnet, local_ipv4_address, subnet_cidr
from .lan_mapper import probe_host, resolve_hardware_address, resolve_hostname
from .models import Device, HardwareAddress, ScanEvent, ScanSettings, ScanSummary
from .tcp_scanner import DEFAULT_PORTS, scan_ports, service_name

__all__ = [
    "DEFAULT_PORTS",
    "Device",
    "HardwareAddress",
    "ScanCallbacks",
    "ScanCoordinator",
    "ScanEvent",
    "ScanJob",
    "ScanSettings",
    "ScanSummary",
    "enumerate_subnet",
    "local_ipv4_address",
    "probe_host",
    "resolve_hardware_address",
    "resolve_hostname",
    "scan_ports",
    "service_name",
    "subnet_cidr",
]
