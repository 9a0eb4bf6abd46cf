# citynav/core/logging_config.py
from loguru import logger
import sys

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


def setup_logging(level: str = "INFO") -> None:
    """
    Route all planner logs to a single stdout sink at `level`.

    Safe to call again (e.g. from create_app()) to change the level.
    """
    logger.remove()

    logger.add(
        sys.stdout,
        level=level.upper(),
        format=LOG_FORMAT,
        backtrace=True,
        diagnose=False,
    )
