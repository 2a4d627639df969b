"""Configuration layer: environment settings and logging setup."""

from standin.config.logging import configure_from_settings, configure_logging
from standin.config.settings import StandinSettings

__all__ = ["StandinSettings", "configure_from_settings", "configure_logging"]
