from __future__ import annotations

import logging

import pytest

from irclobby.errors import (
    AlreadyInRoom,
    DisconnectError,
    InternalError,
    MessageTooLong,
    NetworkError,
    NicknameInvalid,
    NoAvailableRoomError,
    NotConnectedError,
    OutOfRange,
    ParseFailure,
    ProtocolParseError,
    ToggleStatusError,
    UserNotInLobby,
    classify_error,
    log_error,
)
from irclobby.lobby import find_available_room
from irclobby.logging_config import ErrorAggregator, error_aggregator, log_structured_error


def test_internal_error_copies_data():
    data = {"room_id": 3}
    err = InternalError("boom", data=data)
    data["room_id"] = 4
    assert err.data == {"room_id": 3}
    assert InternalError("plain").data == {}


def test_protocol_parse_error_carries_reason():
    err = ProtocolParseError(ParseFailure.MISSING_COMMAND, ":prefixonly")
    assert err.reason is ParseFailure.MISSING_COMMAND
    assert err.line == ":prefixonly"
    assert err.data == {"reason": "missing_command"}


def test_disconnect_error_is_network_error():
    err = DisconnectError(NetworkError("a"), NetworkError("b"))
    assert isinstance(err, NetworkError)
    assert err.data == {"quit_error": "a", "close_error": "b"}


@pytest.mark.parametrize(
    "error,category",
    [
        (NetworkError("x"), "network"),
        (DisconnectError(NetworkError("a"), NetworkError("b")), "network"),
        (ConnectionResetError(), "network"),
        (ProtocolParseError(ParseFailure.EMPTY_LINE), "protocol"),
        (AlreadyInRoom("x"), "state"),
        (MessageTooLong("x"), "validation"),
        (NoAvailableRoomError("x"), "internal"),
        (ValueError("x"), "unknown"),
    ],
)
def test_classify_error(error, category):
    assert classify_error(error) == category


def test_log_error_records_structured_line(caplog):
    caplog.set_level(logging.ERROR)
    log_error("Sending JOIN failed", NetworkError("reset", data={"port": 6667}), {"user": "al"})

    record = caplog.records[-1]
    assert record.message.startswith("[NETWORK] Sending JOIN failed: reset")
    assert "port=6667" in record.message
    assert "user=al" in record.message
    summary = error_aggregator.get_error_summary()
    assert summary["network"]["total_count"] == 1


def test_log_structured_error_without_context(caplog):
    caplog.set_level(logging.WARNING)
    log_structured_error("protocol", "odd line", level=logging.WARNING)
    assert caplog.records[-1].message == "[PROTOCOL] odd line"


def test_error_aggregator_caps_entries_per_type():
    aggregator = ErrorAggregator(max_per_type=3)
    for i in range(5):
        aggregator.record_error("network", f"err {i}")
    summary = aggregator.get_error_summary()
    assert summary["network"]["total_count"] == 3
    assert summary["network"]["last_occurrence"]["message"] == "err 4"
    aggregator.clear()
    assert aggregator.get_error_summary() == {}


@pytest.mark.asyncio
async def test_session_send_failure_is_aggregated(connected_session, transport):
    transport.fail_send(b"JOIN", NetworkError("reset"))
    with pytest.raises(NetworkError):
        await connected_session.join_room(1)
    assert error_aggregator.get_error_summary()["network"]["total_count"] == 1


class TestSessionFailuresAreAggregated:
    @pytest.mark.asyncio
    async def test_connect_failure(self, session, transport):
        transport.connect_error = NetworkError("refused")
        with pytest.raises(NetworkError):
            await session.connect("alice")
        network = error_aggregator.get_error_summary()["network"]
        assert network["total_count"] == 1
        assert network["last_occurrence"]["context"]["user"] == "alice"

    @pytest.mark.asyncio
    async def test_handshake_send_failure(self, session, transport):
        transport.fail_send(b"PASS", NetworkError("reset"))
        with pytest.raises(NetworkError):
            await session.connect("alice")
        assert error_aggregator.get_error_summary()["network"]["total_count"] == 1

    @pytest.mark.asyncio
    async def test_close_failure_on_disconnect(self, connected_session, transport):
        transport.disconnect_error = NetworkError("close failed")
        with pytest.raises(NetworkError):
            await connected_session.disconnect()
        network = error_aggregator.get_error_summary()["network"]
        assert network["total_count"] == 1
        assert "close failed" in network["last_occurrence"]["message"]

    @pytest.mark.asyncio
    async def test_quit_and_close_failures_each_recorded(
        self, connected_session, transport
    ):
        transport.fail_send(b"QUIT", NetworkError("reset"))
        transport.disconnect_error = NetworkError("close failed")
        with pytest.raises(DisconnectError):
            await connected_session.disconnect()
        assert error_aggregator.get_error_summary()["network"]["total_count"] == 2

    @pytest.mark.asyncio
    async def test_operation_on_disconnected_session(self, session):
        with pytest.raises(NotConnectedError):
            await session.join_room(1)
        assert error_aggregator.get_error_summary()["state"]["total_count"] == 1

    @pytest.mark.asyncio
    async def test_second_join_is_a_state_error(self, connected_session):
        await connected_session.join_room(1)
        with pytest.raises(AlreadyInRoom):
            await connected_session.join_room(2)
        assert error_aggregator.get_error_summary()["state"]["total_count"] == 1

    @pytest.mark.asyncio
    async def test_invalid_nickname(self, session, transport):
        with pytest.raises(NicknameInvalid):
            await session.connect("waytoolongnick")
        assert transport.calls == []
        assert error_aggregator.get_error_summary()["validation"]["total_count"] == 1

    @pytest.mark.asyncio
    async def test_room_id_out_of_range(self, connected_session):
        with pytest.raises(OutOfRange):
            await connected_session.join_room(1000)
        assert error_aggregator.get_error_summary()["validation"]["total_count"] == 1

    @pytest.mark.asyncio
    async def test_toggle_of_free_room(self, connected_session, transport):
        transport.queue_topic("#cruce-game003", None)
        with pytest.raises(ToggleStatusError):
            await connected_session.toggle_room_status(3)
        assert error_aggregator.get_error_summary()["internal"]["total_count"] == 1

    @pytest.mark.asyncio
    async def test_discovery_exhausted(self, connected_session, transport):
        transport.queue_topic("#cruce-game000", "WAITING")
        transport.queue_topic("#cruce-game001", "PLAYING")
        with pytest.raises(NoAvailableRoomError):
            await find_available_room(connected_session, 0, 1)
        internal = error_aggregator.get_error_summary()["internal"]
        assert internal["last_occurrence"]["context"]["queries"] == 2

    @pytest.mark.asyncio
    async def test_invite_of_missing_user(self, connected_session, transport):
        await connected_session.join_room(1)
        transport.queue_reply(":irc.test 353 alice = #lobby :alice @bob")
        with pytest.raises(UserNotInLobby):
            await connected_session.invite("carol")
        internal = error_aggregator.get_error_summary()["internal"]
        assert internal["last_occurrence"]["context"]["target"] == "carol"


def test_error_summary_report(caplog):
    caplog.set_level(logging.INFO)
    aggregator = ErrorAggregator()
    aggregator.log_summary_report()
    aggregator.record_error("protocol", "empty reply")
    aggregator.log_summary_report()

    msgs = [r.message for r in caplog.records]
    assert "No errors recorded in current session" in msgs
    assert "ERROR SUMMARY REPORT" in msgs
    assert any("protocol: 1 total" in m for m in msgs)
    assert any("Last: empty reply" in m for m in msgs)
