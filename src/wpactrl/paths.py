"""Socket path conventions for control sessions."""

import itertools
import os
import tempfile
import threading
from pathlib import Path

DEFAULT_CTRL_DIR = Path("/var/run/wpa_supplicant")
DEFAULT_INTERFACE = "wlan0"
ENDPOINT_PREFIX = "wpa_ctrl_"

# Process-wide, endpoint names stay unique across sessions
_counter = itertools.count()
_counter_lock = threading.Lock()


def get_client_dir() -> Path:
    """Get the default directory for local endpoint sockets.

    Returns:
        The system temporary directory
    """
    return Path(tempfile.gettempdir())


def ctrl_path(
    interface: str = DEFAULT_INTERFACE, ctrl_dir: str | Path | None = None
) -> Path:
    """Build the daemon's control socket path for an interface.

    Args:
        interface: Managed interface name (e.g., "wlan0")
        ctrl_dir: Shared control directory, /var/run/wpa_supplicant if omitted

    Returns:
        Path to the daemon's control socket
    """
    if not interface or "/" in interface:
        raise ValueError(f"Invalid interface name: {interface!r}")
    return Path(ctrl_dir or DEFAULT_CTRL_DIR) / interface


def endpoint_path(client_dir: str | Path | None = None) -> Path:
    """Generate a fresh local endpoint path.

    Names combine the process id with a process-wide counter, so sessions
    opened concurrently in one process or across processes never collide.

    Args:
        client_dir: Directory for the socket file, system temp dir if omitted

    Returns:
        Path that no other live session on this host uses
    """
    with _counter_lock:
        counter = next(_counter)
    directory = Path(client_dir) if client_dir else get_client_dir()
    return directory / f"{ENDPOINT_PREFIX}{os.getpid()}-{counter}"


def get_config_dir() -> Path:
    """Get XDG-compliant configuration directory.

    Priority:
    1. $XDG_CONFIG_HOME/wpactrl/
    2. ~/.config/wpactrl/

    Returns:
        Path to configuration directory
    """
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "wpactrl"
    return Path.home() / ".config" / "wpactrl"
