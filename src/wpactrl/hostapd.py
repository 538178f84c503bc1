"""hostapd helpers built on the control session."""

import logging
from dataclasses import dataclass, field

from .errors import ProtocolError
from .session import ControlSession

logger = logging.getLogger(__name__)

END_OF_LIST = {"", "FAIL", "UNKNOWN COMMAND"}


@dataclass
class Station:
    """A station associated with a hostapd access point.

    Args:
        address: MAC address (first line of the STA-FIRST/STA-NEXT reply)
        variables: Remaining key=value lines (flags, aid, rx_bytes, dot11RSNA*, ...)
    """

    address: str
    variables: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_reply(cls, reply: str) -> "Station":
        address = reply.split("\n", 1)[0].strip()
        if not address:
            raise ProtocolError(f"Station reply has no address line: {reply!r}")
        return cls(address=address, variables=parse_key_values(reply))


def parse_key_values(text: str) -> dict[str, str]:
    """Parse key=value lines; lines without '=' are skipped.

    The value is everything after the first '=', so values containing
    '=' survive intact.
    """
    values: dict[str, str] = {}
    for line in text.splitlines():
        key, sep, value = line.partition("=")
        if sep and key:
            values[key] = value
    return values


def list_stations(session: ControlSession, timeout: float | None = None) -> list[Station]:
    """Enumerate associated stations with STA-FIRST / STA-NEXT.

    Args:
        session: Open session to hostapd's control socket
        timeout: Per-request timeout, session default if omitted

    Returns:
        Stations in the order hostapd reports them; empty if none

    Raises:
        ProtocolError: When a station reply has no address line
    """
    stations: list[Station] = []
    reply = session.request("STA-FIRST", timeout)
    while reply.strip() not in END_OF_LIST:
        station = Station.from_reply(reply)
        stations.append(station)
        reply = session.request(f"STA-NEXT {station.address}", timeout)
    logger.debug(f"Found {len(stations)} stations")
    return stations
