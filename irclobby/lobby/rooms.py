"""Room naming and topic-encoded room status.

A room is the channel ``#<prefix>-game<NNN>``. Its topic carries the status:
no topic means the room is free, otherwise the topic is WAITING or PLAYING.
"""

from __future__ import annotations

from ..constants import (
    DEFAULT_ROOM_PREFIX,
    ROOM_ID_DIGITS,
    ROOM_ID_MAX,
    ROOM_ID_MIN,
    TOPIC_FREE_MARKER,
    TOPIC_PLAYING,
    TOPIC_WAITING,
)
from ..errors.internal import OutOfRange, ToggleStatusError
from ..irc.models import RoomStatus

_NEXT_TOPIC = {
    RoomStatus.WAITING: TOPIC_PLAYING,
    RoomStatus.PLAYING: TOPIC_WAITING,
}


def validate_room_id(room_id: int) -> int:
    # bool is an int subclass but never a room id
    if isinstance(room_id, bool) or not isinstance(room_id, int):
        raise OutOfRange(f"Room id must be an integer, got {room_id!r}")
    if not ROOM_ID_MIN <= room_id <= ROOM_ID_MAX:
        raise OutOfRange(
            f"Room id {room_id} outside [{ROOM_ID_MIN}, {ROOM_ID_MAX}]",
            data={"room_id": room_id},
        )
    return room_id


def format_room_name(room_id: int, prefix: str = DEFAULT_ROOM_PREFIX) -> str:
    """Return the channel name for a room, e.g. ``#cruce-game005``.

    Raises:
        OutOfRange: room_id is not in [0, 999].
    """
    validate_room_id(room_id)
    return f"#{prefix}-game{room_id:0{ROOM_ID_DIGITS}d}"


def parse_topic_status(text: str) -> RoomStatus:
    """Classify the text of a TOPIC reply.

    The free marker is server-authored and matched case-insensitively; the
    WAITING/PLAYING markers are written by this client and matched exactly.
    Checked in order free, waiting, playing.
    """
    if TOPIC_FREE_MARKER in text.lower():
        return RoomStatus.FREE
    if TOPIC_WAITING in text:
        return RoomStatus.WAITING
    if TOPIC_PLAYING in text:
        return RoomStatus.PLAYING
    return RoomStatus.UNKNOWN


def next_status(current: RoomStatus) -> str:
    """Return the topic string a room moves to when its status is toggled.

    Raises:
        ToggleStatusError: current is FREE or UNKNOWN.
    """
    try:
        return _NEXT_TOPIC[current]
    except KeyError:
        raise ToggleStatusError(
            f"Cannot toggle a room whose status is {current.value}",
            data={"status": current.value},
        ) from None
