"""Unix datagram transport for the daemon's control socket."""

import errno
import logging
import select
import socket
from pathlib import Path

from .errors import ConnectError, ControlTimeoutError, CtrlIOError
from .paths import endpoint_path

logger = logging.getLogger(__name__)

BUF_SIZE = 10_240
SEND_TIMEOUT = 1.0


class DatagramTransport:
    """Local datagram endpoint connected to the daemon's control socket.

    Raw send/receive only: one call moves exactly one datagram.
    """

    def __init__(
        self, sock: socket.socket, local_path: Path, peer_path: Path, nonblocking: bool
    ) -> None:
        self.sock = sock
        self.local_path = local_path
        self.peer_path = peer_path
        self.nonblocking = nonblocking

    @classmethod
    def open(
        cls,
        local_dir: str | Path | None,
        peer_path: str | Path,
        nonblocking: bool = False,
    ) -> "DatagramTransport":
        """Bind a uniquely named local socket and connect it to the peer.

        Args:
            local_dir: Directory for the local socket file
            peer_path: The daemon's control socket
            nonblocking: Wait with select() on a non-blocking socket

        Returns:
            Connected transport

        Raises:
            ConnectError: When the peer is absent or binding/connecting fails
        """
        peer_path = Path(peer_path)
        if not peer_path.exists():
            raise ConnectError(f"Control socket not found: {peer_path}")

        local_path = endpoint_path(local_dir)
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_DGRAM)
        try:
            cls._bind(sock, local_path)
        except OSError as e:
            sock.close()
            raise ConnectError(f"Unable to bind {local_path}: {e}", e) from e

        try:
            sock.connect(str(peer_path))
            sock.setblocking(not nonblocking)
        except OSError as e:
            sock.close()
            _unlink(local_path)
            raise ConnectError(f"Unable to connect to {peer_path}: {e}", e) from e

        logger.debug(f"Bound {local_path} -> {peer_path}")
        return cls(sock, local_path, peer_path, nonblocking)

    @staticmethod
    def _bind(sock: socket.socket, local_path: Path) -> None:
        try:
            sock.bind(str(local_path))
        except OSError as e:
            if e.errno != errno.EADDRINUSE:
                raise
            # Leftover from a dead process that had the same pid; retry once
            logger.warning(f"Removing stale socket file {local_path}")
            local_path.unlink()
            sock.bind(str(local_path))

    @property
    def closed(self) -> bool:
        return self.sock.fileno() == -1

    def peer_present(self) -> bool:
        """Whether the daemon's control socket file still exists.

        A connected datagram socket gets no error when the daemon exits, so
        a vanished socket file is the only sign the peer went away.
        """
        return self.peer_path.is_socket()

    def send(self, data: bytes) -> None:
        """Transmit one datagram, waiting at most SEND_TIMEOUT for buffer space.

        Raises:
            CtrlIOError: When the datagram cannot be sent
        """
        try:
            if self.nonblocking:
                _, writable, _ = select.select([], [self.sock], [], SEND_TIMEOUT)
                if not writable:
                    raise CtrlIOError(f"{self.peer_path} not writable within {SEND_TIMEOUT}s")
            else:
                self.sock.settimeout(SEND_TIMEOUT)
            self.sock.send(data)
        except (OSError, ValueError) as e:
            raise CtrlIOError(f"Failed to send to {self.peer_path}: {e}", e) from e
        logger.debug(f"Sent {data!r}")

    def receive(self, timeout: float) -> bytes:
        """Wait up to timeout seconds for exactly one datagram.

        A timeout of zero or less polls without blocking.

        Raises:
            ControlTimeoutError: When nothing arrives in time
            CtrlIOError: When the socket fails; ConnectionError subclasses
                are kept as original_error so callers can tell a vanished
                peer apart
        """
        timeout = max(timeout, 0.0)
        if self.nonblocking and not self._wait_readable(timeout):
            raise ControlTimeoutError(f"No datagram within {timeout:.3f}s")
        try:
            if not self.nonblocking:
                # A zero timeout puts the socket in non-blocking mode
                self.sock.settimeout(timeout)
            data = self.sock.recv(BUF_SIZE)
        except (BlockingIOError, socket.timeout) as e:
            raise ControlTimeoutError(f"No datagram within {timeout:.3f}s") from e
        except OSError as e:
            raise CtrlIOError(f"Failed to receive from {self.peer_path}: {e}", e) from e
        logger.debug(f"Received {data!r}")
        return data

    def _wait_readable(self, timeout: float) -> bool:
        try:
            readable, _, _ = select.select([self.sock], [], [], timeout)
        except (OSError, ValueError) as e:
            raise CtrlIOError(f"Failed to wait on {self.local_path}: {e}", e) from e
        return bool(readable)

    def close(self) -> None:
        """Close the socket and unlink the local path. Idempotent."""
        self.sock.close()
        _unlink(self.local_path)


def _unlink(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Unable to unlink {path}: {e}")
