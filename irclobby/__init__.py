"""IRC lobby client.

Game lobby and matchmaking on top of plain IRC channels: a fixed lobby
channel for presence and chat, and numbered room channels whose topic
encodes the room status.
"""

from .config import LobbyConfig
from .irc import IRCMessage, RoomStatus, encode_irc_message, parse_irc_message
from .lobby import LobbySession, find_available_room

__version__ = "0.1.0"

__all__ = [
    "IRCMessage",
    "LobbyConfig",
    "LobbySession",
    "RoomStatus",
    "encode_irc_message",
    "find_available_room",
    "parse_irc_message",
    "__version__",
]
