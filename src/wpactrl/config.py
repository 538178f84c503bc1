"""Configuration management for wpactrl.

Loads configuration from ~/.config/wpactrl/config.toml.
Priority chain: CLI flags > env vars > config file > defaults.
"""

import os
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path

from .errors import ConfigError
from .paths import (
    DEFAULT_CTRL_DIR,
    DEFAULT_INTERFACE,
    ctrl_path,
    get_client_dir,
    get_config_dir,
)

DEFAULT_TIMEOUT = 10.0

DEFAULT_CONFIG = """\
# wpactrl configuration

[ctrl]
# Interface whose control socket to talk to
interface = "wlan0"

# Directory holding the daemon's control sockets (one per interface)
ctrl_dir = "/var/run/wpa_supplicant"

# Full control socket path, overrides ctrl_dir/interface when set
# ctrl_path = "/var/run/hostapd/wlan0"

# Directory for this client's own socket files (system temp dir if omitted)
# client_dir = "/tmp"

# Default reply timeout in seconds
timeout = 10.0

# Wait with select() on a non-blocking socket instead of socket timeouts
nonblocking = false
"""

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class CtrlConfig:
    """Settings consumed when opening a control session."""

    ctrl_path: Path
    client_dir: Path
    timeout: float = DEFAULT_TIMEOUT
    nonblocking: bool = False

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not self.timeout > 0:
            raise ConfigError(f"timeout must be positive, got {self.timeout!r}")

    def with_overrides(self, **overrides: object) -> "CtrlConfig":
        """Return a copy with every non-None override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        for key in ("ctrl_path", "client_dir"):
            if key in changes:
                changes[key] = Path(changes[key])  # type: ignore[arg-type]
        return replace(self, **changes)  # type: ignore[arg-type]


_cached_config: CtrlConfig | None = None


def get_config_path() -> Path:
    """Get the config file location."""
    return get_config_dir() / "config.toml"


def generate_config() -> Path:
    """Generate default config file at ~/.config/wpactrl/config.toml."""
    path = get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(DEFAULT_CONFIG)
    return path


def _parse_bool(name: str, value: object) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ConfigError(f"{name} must be a boolean, got {value!r}")


def _parse_timeout(name: str, value: object) -> float:
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{name} must be a number, got {value!r}", e) from e


def load_config() -> CtrlConfig:
    """Load configuration from config file with env var overrides.

    A missing config file is not an error: built-in defaults apply.

    Returns:
        Loaded and validated CtrlConfig.

    Raises:
        ConfigError: If the file cannot be parsed or a value is invalid.
    """
    global _cached_config
    if _cached_config is not None:
        return _cached_config

    config_path = get_config_path()
    data: dict = {}
    if config_path.exists():
        try:
            with open(config_path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid config file {config_path}: {e}", e) from e

    ctrl = data.get("ctrl", {})
    if not isinstance(ctrl, dict):
        raise ConfigError(f"[ctrl] in {config_path} must be a table")

    # Env vars override config file values
    interface = os.getenv("WPACTRL_INTERFACE", ctrl.get("interface", DEFAULT_INTERFACE))
    ctrl_dir = os.getenv("WPACTRL_CTRL_DIR", ctrl.get("ctrl_dir", str(DEFAULT_CTRL_DIR)))
    explicit_path = os.getenv("WPACTRL_CTRL_PATH", ctrl.get("ctrl_path"))
    client_dir = os.getenv("WPACTRL_CLIENT_DIR", ctrl.get("client_dir"))
    timeout = os.getenv("WPACTRL_TIMEOUT", ctrl.get("timeout", DEFAULT_TIMEOUT))
    nonblocking = os.getenv("WPACTRL_NONBLOCKING", ctrl.get("nonblocking", False))

    try:
        peer = Path(explicit_path) if explicit_path else ctrl_path(interface, ctrl_dir)
    except ValueError as e:
        raise ConfigError(str(e), e) from e

    _cached_config = CtrlConfig(
        ctrl_path=peer,
        client_dir=Path(client_dir) if client_dir else get_client_dir(),
        timeout=_parse_timeout("timeout", timeout),
        nonblocking=_parse_bool("nonblocking", nonblocking),
    )

    return _cached_config


def reset_config_cache() -> None:
    """Forget the cached configuration so the next load re-reads it."""
    global _cached_config
    _cached_config = None
