"""Configuration package exports."""

from .loader import load_config
from .model import LobbyConfig

__all__ = ["LobbyConfig", "load_config"]
