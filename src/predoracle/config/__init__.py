"""Configuration loading (TOML profiles) and logging setup."""

from predoracle.config.settings import Settings, configure_logging, get_settings, load_config

__all__ = ["Settings", "configure_logging", "get_settings", "load_config"]
