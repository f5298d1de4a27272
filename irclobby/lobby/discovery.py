"""Linear scan for a free room.

The result is a hint, not a reservation: another client can claim the room
between the scan and a later JOIN.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..constants import ROOM_ID_MAX, ROOM_ID_MIN
from ..errors.handling import log_error
from ..errors.internal import NoAvailableRoomError
from ..irc.models import RoomStatus
from ..logs.logger import logger

if TYPE_CHECKING:  # pragma: no cover
    from .session import LobbySession


async def find_available_room(
    session: LobbySession, first: int = ROOM_ID_MIN, last: int = ROOM_ID_MAX
) -> int:
    """Return the lowest room id in [first, last] whose status is FREE.

    Issues one TOPIC query per room, sequentially. Query failures propagate
    and end the scan.

    Raises:
        NoAvailableRoomError: every room in the range is taken or unrecognised.
    """
    logger.log_event(
        "discovery",
        "start",
        level=logging.DEBUG,
        user=session.nickname,
        first=first,
        last=last,
    )
    queries = 0
    for room_id in range(first, last + 1):
        status = await session.query_room_status(room_id)
        queries += 1
        if status is RoomStatus.FREE:
            logger.log_event(
                "discovery",
                "found",
                user=session.nickname,
                room_id=room_id,
                queries=queries,
            )
            return room_id

    logger.log_event(
        "discovery",
        "exhausted",
        level=logging.WARNING,
        user=session.nickname,
        queries=queries,
    )
    error = NoAvailableRoomError(
        f"No free room in [{first}, {last}]", data={"queries": queries}
    )
    log_error("Room discovery failed", error, context={"user": session.nickname})
    raise error
