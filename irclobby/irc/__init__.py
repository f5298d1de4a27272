"""IRC protocol subpackage.

Message codec, shared models and the transport seam used by the lobby layer.
"""

from .models import ConnectionState, NamesScope, RoomStatus  # noqa: F401
from .parser import IRCMessage, encode_irc_message, parse_irc_message  # noqa: F401
from .transport import AsyncioTransport, Transport  # noqa: F401

__all__ = [
    "AsyncioTransport",
    "ConnectionState",
    "IRCMessage",
    "NamesScope",
    "RoomStatus",
    "Transport",
    "encode_irc_message",
    "parse_irc_message",
]
