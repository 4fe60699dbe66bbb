"""Tests for the TCP port scanner."""

import socket
from unittest.mock import MagicMock

import pytest

from znetscan.scanner import tcp_scanner
from znetscan.scanner.tcp_scanner import DEFAULT_PORTS, is_port_open, scan_ports, service_name


@pytest.fixture
def listening_port():
    server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    server.bind(("127.0.0.1", 0))
    server.listen(4)
    try:
        yield server.getsockname()[1]
    finally:
        server.close()


@pytest.fixture
def closed_port():
    probe = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    probe.bind(("127.0.0.1", 0))
    port = probe.getsockname()[1]
    probe.close()
    return port


def _open_only(open_ports):
    return lambda host, port, timeout=1.0: port in open_ports


def test_declared_port_order():
    assert DEFAULT_PORTS == (80, 443, 22, 21, 3389, 8080, 1723)


def test_open_ports_follow_declared_order_not_numeric(monkeypatch):
    monkeypatch.setattr(tcp_scanner, "is_port_open", _open_only({22, 80}))
    assert scan_ports("10.0.0.1") == [80, 22]

    monkeypatch.setattr(tcp_scanner, "is_port_open", _open_only({443, 80}))
    assert scan_ports("10.0.0.1") == [80, 443]

    monkeypatch.setattr(tcp_scanner, "is_port_open", _open_only({1723, 3389, 21}))
    assert scan_ports("10.0.0.1") == [21, 3389, 1723]


def test_scan_never_reports_ports_outside_candidates(monkeypatch):
    monkeypatch.setattr(tcp_scanner, "is_port_open", lambda host, port, timeout=1.0: True)
    assert scan_ports("10.0.0.1") == list(DEFAULT_PORTS)


def test_all_closed_returns_empty(monkeypatch):
    monkeypatch.setattr(tcp_scanner, "is_port_open", lambda host, port, timeout=1.0: False)
    assert scan_ports("10.0.0.1") == []


def test_is_port_open_against_local_listener(listening_port, closed_port):
    assert is_port_open("127.0.0.1", listening_port, timeout=0.5) is True
    assert is_port_open("127.0.0.1", closed_port, timeout=0.5) is False


def test_invalid_port_is_closed():
    assert is_port_open("127.0.0.1", 70000) is False
    assert is_port_open("127.0.0.1", -1) is False


def test_socket_released_when_connect_fails(monkeypatch):
    sock = MagicMock()
    sock.__enter__.return_value = sock
    sock.__exit__.return_value = False
    sock.connect.side_effect = socket.timeout("timed out")
    monkeypatch.setattr(tcp_scanner.socket, "socket", lambda *args, **kwargs: sock)

    assert is_port_open("10.0.0.1", 80, timeout=0.1) is False
    sock.settimeout.assert_called_once_with(0.1)
    sock.__exit__.assert_called_once()


def test_service_names():
    assert service_name(80) == "HTTP"
    assert service_name(8080) == "HTTP-Proxy"
    assert service_name(1723) == "PPTP"
    assert service_name(5432) == "Unknown"


def test_requested_ports_are_restricted_to_candidates(monkeypatch):
    monkeypatch.setattr(tcp_scanner, "is_port_open", lambda host, port, timeout=1.0: True)
    assert scan_ports("10.0.0.1", (22, 9999, 80)) == [80, 22]
    assert scan_ports("10.0.0.1", (9999,)) == list(DEFAULT_PORTS)
