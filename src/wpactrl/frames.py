"""Frame classification for the control channel.

Every datagram received from the daemon is either a reply to the pending
command or an unsolicited event. Events start with a priority marker
``<N>`` (N = 0-7, the daemon's message level) directly followed by the
message text, e.g. ``<2>CTRL-EVENT-CONNECTED - Connection to ...``.
Anything else is a reply, including empty and malformed frames, so a
corrupted frame can never hide the reply a caller is waiting for.
"""

import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)

EVENT_PATTERN = re.compile(r"<([0-7])>(.+)", re.DOTALL)


@dataclass(frozen=True)
class Reply:
    """A frame sent in direct response to a command."""

    text: str


@dataclass(frozen=True)
class Event:
    """An unsolicited frame pushed by the daemon after attachment.

    Args:
        severity: Priority marker value (0-7)
        body: Message text following the marker
    """

    severity: int
    body: str

    @property
    def raw(self) -> str:
        """The frame as received, marker included."""
        return f"<{self.severity}>{self.body}"

    @property
    def keyword(self) -> str:
        """Leading tag of the message (e.g., "CTRL-EVENT-CONNECTED")."""
        parts = self.body.split(maxsplit=1)
        return parts[0] if parts else ""

    def __str__(self) -> str:
        return self.raw


Frame = Reply | Event


def decode(data: bytes) -> str:
    """Decode a datagram, replacing invalid UTF-8 rather than dropping it."""
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        logger.warning(f"Frame is not valid UTF-8, decoding with replacement: {data!r}")
        return data.decode("utf-8", errors="replace")


def classify(frame: bytes | str) -> Frame:
    """Classify a received frame as a Reply or an Event.

    Args:
        frame: Raw datagram bytes or already decoded text

    Returns:
        Event if the frame carries a valid priority marker and message text,
        otherwise Reply with the text unchanged
    """
    text = decode(frame) if isinstance(frame, bytes) else frame
    match = EVENT_PATTERN.fullmatch(text)
    if match is None:
        return Reply(text)
    return Event(severity=int(match.group(1)), body=match.group(2))
