"""Exceptions raised by the scanner package."""

from __future__ import annotations


class ZNetScanError(Exception):
    """Base class for scanner errors."""


class NoInterfaceFound(ZNetScanError):
    """No up, non-loopback IPv4 interface is available to derive a subnet from."""


class ScanInProgress(ZNetScanError):
    """A scan was started while another one owned by the same coordinator is running."""
