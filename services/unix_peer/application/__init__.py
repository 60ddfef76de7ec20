"""Application services built on the stream peer port."""

from .session import receive_exactly, receive_until_eof, send_all
from .settings import PeerSettings, SettingsError, load_config_file, load_settings

__all__ = [
    "PeerSettings",
    "SettingsError",
    "load_config_file",
    "load_settings",
    "receive_exactly",
    "receive_until_eof",
    "send_all",
]
