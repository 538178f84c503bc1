"""Integration tests for the datagram transport."""

import socket
import time

import pytest

from test_helpers import FakeDaemon
from wpactrl.errors import ConnectError, ControlTimeoutError
from wpactrl.transport import DatagramTransport

pytestmark = pytest.mark.integration


class TestOpen:
    """Test binding and connecting."""

    def test_missing_peer_raises_connect_error(self, sock_dir, client_dir) -> None:
        """Test an absent control socket is reported before binding."""
        with pytest.raises(ConnectError, match="Control socket not found"):
            DatagramTransport.open(client_dir, sock_dir / "wlan9")

        assert list(client_dir.iterdir()) == []

    def test_missing_client_dir_raises_connect_error(self, daemon, sock_dir) -> None:
        """Test bind failures surface as ConnectError."""
        with pytest.raises(ConnectError, match="Unable to bind"):
            DatagramTransport.open(sock_dir / "missing", daemon.path)

    def test_peer_that_is_not_a_socket(self, sock_dir, client_dir) -> None:
        """Test connect failures clean up the local file."""
        peer = sock_dir / "plain-file"
        peer.write_text("")

        with pytest.raises(ConnectError, match="Unable to connect"):
            DatagramTransport.open(client_dir, peer)

        assert list(client_dir.iterdir()) == []

    def test_stale_endpoint_file_is_replaced_once(
        self, daemon, client_dir, monkeypatch
    ) -> None:
        """Test a leftover file at the chosen path is unlinked and rebound."""
        stale = client_dir / "wpa_ctrl_stale"
        leftover = socket.socket(socket.AF_UNIX, socket.SOCK_DGRAM)
        leftover.bind(str(stale))
        leftover.close()
        monkeypatch.setattr("wpactrl.transport.endpoint_path", lambda _dir: stale)

        transport = DatagramTransport.open(client_dir, daemon.path)
        try:
            assert transport.local_path == stale
            transport.send(b"PING")
            assert transport.receive(2.0) == b"PONG\n"
        finally:
            transport.close()


@pytest.mark.parametrize("nonblocking", [False, True])
class TestSendReceive:
    """Test both waiting modes honour the same contract."""

    def test_one_datagram_per_receive(self, daemon: FakeDaemon, client_dir, nonblocking) -> None:
        """Test each receive returns exactly one frame."""
        daemon.on("SCAN", "<2>CTRL-EVENT-SCAN-STARTED ", "OK\n")
        transport = DatagramTransport.open(client_dir, daemon.path, nonblocking=nonblocking)
        try:
            transport.send(b"SCAN")

            assert transport.receive(2.0) == b"<2>CTRL-EVENT-SCAN-STARTED "
            assert transport.receive(2.0) == b"OK\n"
            assert daemon.received == ["SCAN"]
        finally:
            transport.close()

    def test_receive_times_out(self, daemon: FakeDaemon, client_dir, nonblocking) -> None:
        """Test a silent peer yields ControlTimeoutError after the timeout."""
        transport = DatagramTransport.open(client_dir, daemon.path, nonblocking=nonblocking)
        try:
            start = time.monotonic()
            with pytest.raises(ControlTimeoutError):
                transport.receive(0.2)
            assert time.monotonic() - start >= 0.2
        finally:
            transport.close()

    def test_zero_timeout_polls(self, daemon: FakeDaemon, client_dir, nonblocking) -> None:
        """Test a zero timeout returns immediately."""
        transport = DatagramTransport.open(client_dir, daemon.path, nonblocking=nonblocking)
        try:
            start = time.monotonic()
            with pytest.raises(ControlTimeoutError):
                transport.receive(0)
            assert time.monotonic() - start < 0.1
        finally:
            transport.close()


def test_close_unlinks_and_is_idempotent(daemon, client_dir) -> None:
    """Test close removes the endpoint file and can be repeated."""
    transport = DatagramTransport.open(client_dir, daemon.path)
    assert transport.local_path.exists()

    transport.close()
    transport.close()

    assert transport.closed
    assert not transport.local_path.exists()
