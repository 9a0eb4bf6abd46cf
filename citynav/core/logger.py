# citynav/core/logger.py
from loguru import logger

from citynav.core.config import settings
from citynav.core.logging_config import setup_logging

# Modules import the logger from here; the sink is ready before first use
setup_logging(settings.LOG_LEVEL)

__all__ = ["logger"]
