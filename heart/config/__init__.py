"""Runtime configuration for the heart engine."""
from heart.config.settings import HeartSettings, get_settings

__all__ = ["HeartSettings", "get_settings"]
