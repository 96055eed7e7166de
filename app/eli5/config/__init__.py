# Re-export so "from eli5.config import settings" gets the instance
from eli5.config.settings import Environment, ReplyBackend, Settings, get_settings, settings

__all__ = ["Environment", "ReplyBackend", "Settings", "get_settings", "settings"]
