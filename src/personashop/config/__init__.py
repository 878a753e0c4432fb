"""Engine configuration and logging setup."""

from personashop.config.log_setup import configure_logging
from personashop.config.settings import EngineConfig

__all__ = ["EngineConfig", "configure_logging"]
