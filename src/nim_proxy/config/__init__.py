"""
Configuration de NIM Proxy.
"""

from .loader import load_config, reload_config, get_config, load_settings
from .settings import Settings, StreamingPolicy

__all__ = [
    "load_config",
    "reload_config",
    "get_config",
    "load_settings",
    "Settings",
    "StreamingPolicy",
]
