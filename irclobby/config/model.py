from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..constants import (
    DEFAULT_IRC_HOST,
    DEFAULT_IRC_PORT,
    DEFAULT_LOBBY_CHANNEL,
    DEFAULT_ROOM_PREFIX,
)

_ROOM_PREFIX_RE = re.compile(r"^[A-Za-z0-9_-]+$")
# Characters RFC 2812 forbids in a channel name (plus space and comma).
_CHANNEL_FORBIDDEN = (" ", ",", "\x07", "\r", "\n", "\0")


class LobbyConfig(BaseModel):
    """Connection and channel-naming settings injected into a LobbySession.

    Attributes:
        host: IRC server host name.
        port: IRC server TCP port.
        lobby_channel: Channel every client joins on connect.
        room_prefix: Name segment used for room channels (``#<prefix>-gameNNN``).
    """

    model_config = ConfigDict(frozen=True)

    host: str = Field(default=DEFAULT_IRC_HOST, min_length=1)
    port: int = Field(default=DEFAULT_IRC_PORT, ge=1, le=65535)
    lobby_channel: str = DEFAULT_LOBBY_CHANNEL
    room_prefix: str = DEFAULT_ROOM_PREFIX

    @field_validator("lobby_channel")
    @classmethod
    def validate_lobby_channel(cls, v: str) -> str:
        if not v.startswith("#") or len(v) < 2:
            raise ValueError("lobby_channel must start with '#' and have a name")
        if any(ch in v for ch in _CHANNEL_FORBIDDEN):
            raise ValueError("lobby_channel contains a forbidden character")
        return v

    @field_validator("room_prefix")
    @classmethod
    def validate_room_prefix(cls, v: str) -> str:
        if not _ROOM_PREFIX_RE.match(v):
            raise ValueError("room_prefix may only contain letters, digits, '_' and '-'")
        return v

    def room_name(self, room_id: int) -> str:
        # Local import: lobby.session depends on this module.
        from ..lobby.rooms import format_room_name

        return format_room_name(room_id, self.room_prefix)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> LobbyConfig:
        """Create a LobbyConfig from a dictionary, stripping string values.

        Unknown keys are ignored.
        """
        known = cls.model_fields.keys()
        norm: dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                continue
            norm[key] = value.strip() if isinstance(value, str) else value
        return cls(**norm)
