"""Control interface exceptions."""


class WpaCtrlError(Exception):
    """Base exception for control interface errors."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        super().__init__(message)
        self.original_error = original_error


class ConnectError(WpaCtrlError):
    """Exception raised when the local endpoint cannot be bound or connected.

    This typically occurs when:
    - The daemon's control socket does not exist (daemon not running)
    - The client directory is missing or not writable
    - The control socket refuses the connection (insufficient permissions)
    """

    pass


class ControlTimeoutError(WpaCtrlError, TimeoutError):
    """Exception raised when no reply or event arrives before the deadline.

    The session remains usable and the caller may retry.
    """

    pass


class CtrlIOError(WpaCtrlError):
    """Exception raised for transport failures on the datagram socket.

    The session should be discarded and reopened.
    """

    pass


class ProtocolError(WpaCtrlError):
    """Exception raised for unexpected framing or closure mid-exchange."""

    pass


class AttachError(ProtocolError):
    """Exception raised when the daemon answers ATTACH with anything but OK."""

    def __init__(self, reply: str) -> None:
        super().__init__(f"Failed to attach: daemon replied {reply.strip()!r}")
        self.reply = reply


class DetachError(ProtocolError):
    """Exception raised when the daemon answers DETACH with anything but OK."""

    def __init__(self, reply: str) -> None:
        super().__init__(f"Failed to detach: daemon replied {reply.strip()!r}")
        self.reply = reply


class BusyError(WpaCtrlError):
    """Exception raised when a second caller uses a session mid-exchange."""

    pass


class ClosedError(WpaCtrlError):
    """Exception raised for any operation on a closed session."""

    pass


class ConfigError(WpaCtrlError):
    """Exception raised for invalid configuration values."""

    pass
