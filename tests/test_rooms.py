from __future__ import annotations

import pytest

from irclobby.errors import OutOfRange, ToggleStatusError
from irclobby.irc import RoomStatus
from irclobby.lobby import format_room_name, next_status, parse_topic_status


def test_format_room_name_is_zero_padded():
    assert format_room_name(5) == "#cruce-game005"
    assert format_room_name(0, "cruce") == "#cruce-game000"
    assert format_room_name(42, "tarot") == "#tarot-game042"
    assert format_room_name(999, "cruce") == "#cruce-game999"


@pytest.mark.parametrize("room_id", [-1, 1000, 10_000])
def test_format_room_name_out_of_range(room_id):
    with pytest.raises(OutOfRange):
        format_room_name(room_id)


@pytest.mark.parametrize("room_id", [True, 5.0, "5", None])
def test_format_room_name_rejects_non_integers(room_id):
    with pytest.raises(OutOfRange):
        format_room_name(room_id)  # type: ignore[arg-type]


@pytest.mark.parametrize(
    "text,expected",
    [
        ("...:No topic is set...", RoomStatus.FREE),
        ("No topic is set", RoomStatus.FREE),
        ("no topic is set", RoomStatus.FREE),
        (":WAITING", RoomStatus.WAITING),
        ("WAITING", RoomStatus.WAITING),
        (":PLAYING", RoomStatus.PLAYING),
        (":banana", RoomStatus.UNKNOWN),
        ("", RoomStatus.UNKNOWN),
        ("waiting", RoomStatus.UNKNOWN),
        ("No such channel", RoomStatus.UNKNOWN),
    ],
)
def test_parse_topic_status(text, expected):
    assert parse_topic_status(text) is expected


def test_parse_topic_status_priority_order():
    assert parse_topic_status("No topic is set WAITING PLAYING") is RoomStatus.FREE
    assert parse_topic_status("PLAYING then WAITING") is RoomStatus.WAITING


def test_next_status_toggles():
    assert next_status(RoomStatus.WAITING) == "PLAYING"
    assert next_status(RoomStatus.PLAYING) == "WAITING"


@pytest.mark.parametrize("status", [RoomStatus.FREE, RoomStatus.UNKNOWN])
def test_next_status_without_recognised_status(status):
    with pytest.raises(ToggleStatusError) as exc_info:
        next_status(status)
    assert exc_info.value.data["status"] == status.value
