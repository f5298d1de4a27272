"""Shared IRC lobby data models."""

from __future__ import annotations

from enum import Enum, auto


class ConnectionState(Enum):
    DISCONNECTED = auto()
    CONNECTED = auto()


class RoomStatus(Enum):
    FREE = "free"
    WAITING = "waiting"
    PLAYING = "playing"
    UNKNOWN = "unknown"


class NamesScope(Enum):
    LOBBY = auto()
    CURRENT_ROOM = auto()
