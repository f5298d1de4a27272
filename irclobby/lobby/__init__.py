"""Lobby and room matchmaking layer."""

from .discovery import find_available_room
from .rooms import format_room_name, next_status, parse_topic_status, validate_room_id
from .session import LobbySession, validate_nickname

__all__ = [
    "LobbySession",
    "find_available_room",
    "format_room_name",
    "next_status",
    "parse_topic_status",
    "validate_nickname",
    "validate_room_id",
]
