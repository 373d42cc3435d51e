"""Configuration package."""

from .settings import ExpiryPolicy, RuntimeMode, Settings, get_settings

__all__ = ["ExpiryPolicy", "RuntimeMode", "Settings", "get_settings"]
