"""Configuration loading utilities."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from ..errors.internal import ConfigError
from ..logs.logger import logger
from .model import LobbyConfig

CONFIG_ENV_VAR = "IRC_LOBBY_CONF_FILE"
DEFAULT_CONFIG_FILE = "irclobby.conf"


def load_config(path: str | Path | None = None) -> LobbyConfig:
    """Load a LobbyConfig from a JSON file.

    The path defaults to ``$IRC_LOBBY_CONF_FILE`` or ``irclobby.conf``. A
    missing file yields the defaults.

    Raises:
        ConfigError: The file cannot be read, is not JSON or is not an object.
        pydantic.ValidationError: The object holds invalid values.
    """
    config_path = Path(path or os.environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_FILE))
    try:
        with config_path.open("r", encoding="utf-8") as f:
            raw: Any = json.load(f)
    except FileNotFoundError:
        logger.log_event("config", "missing", path=str(config_path))
        return LobbyConfig()
    except json.JSONDecodeError as e:
        raise ConfigError(
            f"{config_path} is not valid JSON: {e}", data={"path": str(config_path)}
        ) from e
    except OSError as e:
        raise ConfigError(
            f"Cannot read {config_path}: {e}", data={"path": str(config_path)}
        ) from e

    if not isinstance(raw, dict):
        raise ConfigError(
            f"{config_path} must contain a JSON object", data={"path": str(config_path)}
        )
    config = LobbyConfig.from_dict(raw)
    logger.log_event("config", "loaded", path=str(config_path))
    return config
