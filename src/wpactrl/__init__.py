"""wpactrl - control-socket client for wpa_supplicant and hostapd."""

from .config import CtrlConfig, load_config
from .errors import (
    AttachError,
    BusyError,
    ClosedError,
    ConfigError,
    ConnectError,
    ControlTimeoutError,
    CtrlIOError,
    DetachError,
    ProtocolError,
    WpaCtrlError,
)
from .frames import Event, Reply, classify
from .session import ControlSession, SessionState

__version__ = "0.1.0"
__all__ = [
    "AttachError",
    "BusyError",
    "ClosedError",
    "ConfigError",
    "ConnectError",
    "ControlSession",
    "ControlTimeoutError",
    "CtrlConfig",
    "CtrlIOError",
    "DetachError",
    "Event",
    "ProtocolError",
    "Reply",
    "SessionState",
    "WpaCtrlError",
    "classify",
    "load_config",
]
