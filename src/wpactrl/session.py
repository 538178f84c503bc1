"""Control sessions with a wpa_supplicant or hostapd daemon.

A session owns one local datagram endpoint connected to the daemon's control
socket. Commands are strictly half-duplex: send one datagram, then read
frames until one classifies as a reply. Event frames read along the way are
queued in arrival order for next_event(), so replies and events never swap
even though both share the same socket.
"""

import logging
import threading
import time
import weakref
from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum
from pathlib import Path

from .config import CtrlConfig, load_config
from .errors import (
    AttachError,
    BusyError,
    ClosedError,
    ControlTimeoutError,
    CtrlIOError,
    DetachError,
    ProtocolError,
    WpaCtrlError,
)
from .events import EventQueue
from .frames import Event, Frame, Reply, classify
from .transport import DatagramTransport

logger = logging.getLogger(__name__)

# Longest single wait before checking the daemon is still there
PEER_CHECK_INTERVAL = 0.1


class SessionState(Enum):
    OPEN = "open"
    ATTACHED = "attached"
    CLOSED = "closed"


class ControlSession:
    """Request/reply session with an optional event subscription.

    Not safe for unsynchronized use from several threads: a second caller
    entering while an exchange is in flight gets BusyError. Use one session
    for commands and a second, attached one for events when both are needed
    concurrently.
    """

    def __init__(self, transport: DatagramTransport, timeout: float) -> None:
        self.transport = transport
        self.timeout = timeout
        self.state = SessionState.OPEN
        self._events = EventQueue()
        self._lock = threading.Lock()
        # Releases the endpoint even if the session is dropped without close()
        self._finalizer = weakref.finalize(self, transport.close)

    @classmethod
    def open(
        cls,
        config: CtrlConfig | None = None,
        *,
        ctrl_path: str | Path | None = None,
        client_dir: str | Path | None = None,
        timeout: float | None = None,
        nonblocking: bool | None = None,
    ) -> "ControlSession":
        """Open a session to the daemon's control socket.

        Args:
            config: Base settings, load_config() if omitted
            ctrl_path: Override for the daemon's control socket path
            client_dir: Override for the local endpoint directory
            timeout: Override for the default reply timeout in seconds
            nonblocking: Override for the socket waiting mode

        Returns:
            Session in the OPEN state

        Raises:
            ConnectError: When the endpoint cannot be bound or connected
        """
        config = (config or load_config()).with_overrides(
            ctrl_path=ctrl_path,
            client_dir=client_dir,
            timeout=timeout,
            nonblocking=nonblocking,
        )
        transport = DatagramTransport.open(
            config.client_dir, config.ctrl_path, nonblocking=config.nonblocking
        )
        logger.debug(f"Opened session {transport.local_path} -> {transport.peer_path}")
        return cls(transport, config.timeout)

    @property
    def local_path(self) -> Path:
        return self.transport.local_path

    @property
    def peer_path(self) -> Path:
        return self.transport.peer_path

    @property
    def attached(self) -> bool:
        return self.state is SessionState.ATTACHED

    @property
    def closed(self) -> bool:
        return self.state is SessionState.CLOSED

    def __enter__(self) -> "ControlSession":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"<ControlSession {self.state.value} "
            f"{self.transport.local_path} -> {self.transport.peer_path}>"
        )

    def request(self, command: str, timeout: float | None = None) -> str:
        """Send a command and wait for its reply.

        Commands are the same as wpa_cli's in upper case (PING, SCAN,
        LIST_NETWORKS, ...). Events that arrive before the reply are queued
        and returned by later next_event() calls; the time spent reading
        them counts against the timeout.

        Args:
            command: Command text, sent as one datagram
            timeout: Seconds to wait for the reply, session default if omitted

        Returns:
            Reply text exactly as sent by the daemon (e.g., "PONG\\n", "FAIL\\n")

        Raises:
            ControlTimeoutError: When no reply arrives in time
            ProtocolError: When the peer disappears or the session is closed
                mid-exchange
            BusyError: When another exchange is in flight on this session
            ClosedError: When the session is closed
            CtrlIOError: When the command cannot be sent
        """
        with self._exclusive():
            return self._request(command, self._budget(timeout))

    def attach(self, timeout: float | None = None) -> bool:
        """Subscribe to unsolicited events.

        Returns:
            True once the daemon acknowledged ATTACH, False if already attached

        Raises:
            AttachError: When the daemon answers anything but OK
        """
        with self._exclusive():
            if self.state is SessionState.ATTACHED:
                logger.debug("Already attached, not sending ATTACH")
                return False
            reply = self._request("ATTACH", self._budget(timeout))
            if reply.strip() != "OK":
                raise AttachError(reply)
            self.state = SessionState.ATTACHED
            logger.debug(f"Attached {self.transport.local_path}")
            return True

    def detach(self, timeout: float | None = None) -> bool:
        """Cancel the event subscription.

        Events already queued stay readable until the session is closed.

        Returns:
            True once the daemon acknowledged DETACH, False if not attached

        Raises:
            DetachError: When the daemon answers anything but OK
        """
        with self._exclusive():
            return self._detach(self._budget(timeout))

    def pending(self) -> int:
        """Number of queued events. Never blocks or reads the socket."""
        self._check_open()
        return len(self._events)

    def next_event(self, timeout: float | None = None) -> Event:
        """Pop the oldest event, waiting for one if the queue is empty.

        Args:
            timeout: Seconds to wait, session default if omitted

        Raises:
            ControlTimeoutError: When no event arrives in time
        """
        with self._exclusive():
            event = self._events.pop()
            if event is not None:
                return event
            budget = self._budget(timeout)
            deadline = time.monotonic() + budget
            while True:
                try:
                    frame = self._receive(deadline)
                except ControlTimeoutError as e:
                    raise ControlTimeoutError(f"No event within {budget:.3f}s") from e
                if isinstance(frame, Event):
                    return frame
                self._discard(frame)

    def poll_event(self) -> Event | None:
        """Pop the oldest event without blocking.

        Returns:
            The oldest queued or already received event, None if there is none
        """
        with self._exclusive():
            event = self._events.pop()
            if event is not None:
                return event
            for frame in self._ready_frames():
                if isinstance(frame, Event):
                    return frame
                self._discard(frame)
            return None

    def close(self, timeout: float | None = None) -> None:
        """Detach if attached, then release the endpoint. Idempotent.

        A failed detach is logged and does not keep the endpoint open.
        Queued events are discarded.
        """
        if self.state is SessionState.CLOSED:
            return
        locked = self._lock.acquire(blocking=False)
        try:
            if locked and self.state is SessionState.ATTACHED:
                try:
                    self._detach(self._budget(timeout))
                except WpaCtrlError as e:
                    logger.warning(f"Detach on close failed: {e}")
        finally:
            self.state = SessionState.CLOSED
            dropped = len(self._events.drain())
            self._finalizer()
            if locked:
                self._lock.release()
        logger.debug(
            f"Closed session {self.transport.local_path} ({dropped} unread events dropped)"
        )

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        self._check_open()
        if not self._lock.acquire(blocking=False):
            raise BusyError("Another exchange is in progress on this session")
        try:
            self._check_open()
            yield
        finally:
            self._lock.release()

    def _check_open(self) -> None:
        if self.state is SessionState.CLOSED:
            raise ClosedError(f"Session {self.transport.local_path} is closed")

    def _budget(self, timeout: float | None) -> float:
        return self.timeout if timeout is None else timeout

    def _request(self, command: str, budget: float) -> str:
        deadline = time.monotonic() + budget
        for frame in self._ready_frames():
            if isinstance(frame, Event):
                self._events.push(frame)
            else:
                self._discard(frame)

        self.transport.send(command.encode())
        while True:
            try:
                frame = self._receive(deadline)
            except ControlTimeoutError as e:
                raise ControlTimeoutError(
                    f"No reply to {command!r} within {budget:.3f}s"
                ) from e
            if isinstance(frame, Reply):
                return frame.text
            logger.debug(f"Queued event while waiting for {command!r}: {frame.raw!r}")
            self._events.push(frame)

    def _detach(self, budget: float) -> bool:
        if self.state is not SessionState.ATTACHED:
            logger.debug("Not attached, not sending DETACH")
            return False
        reply = self._request("DETACH", budget)
        if reply.strip() != "OK":
            raise DetachError(reply)
        self.state = SessionState.OPEN
        logger.debug(
            f"Detached {self.transport.local_path}, {len(self._events)} events kept"
        )
        return True

    def _receive(self, deadline: float) -> Frame:
        """Receive one frame before deadline, checking the peer between slices."""
        while True:
            remaining = deadline - time.monotonic()
            try:
                data = self.transport.receive(min(remaining, PEER_CHECK_INTERVAL))
            except ControlTimeoutError:
                if not self.transport.peer_present():
                    raise ProtocolError(
                        f"Control socket {self.transport.peer_path} disappeared mid-exchange"
                    ) from None
                if remaining <= PEER_CHECK_INTERVAL:
                    raise
                continue
            except CtrlIOError as e:
                if self.transport.closed or isinstance(e.original_error, ConnectionError):
                    raise ProtocolError(f"Control channel closed mid-exchange: {e}", e) from e
                raise
            return classify(data)

    def _ready_frames(self) -> Iterator[Frame]:
        """Frames that already arrived, read without waiting."""
        while True:
            try:
                data = self.transport.receive(0)
            except ControlTimeoutError:
                return
            yield classify(data)

    def _discard(self, frame: Reply) -> None:
        logger.warning(f"Discarding reply with no pending command: {frame.text!r}")
