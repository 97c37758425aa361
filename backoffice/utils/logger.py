"""
Logging configuration

Console sink at the configured level, a daily application log and a
separate error log under ``log_dir``. Report and dashboard failures are
logged once, where they are turned into an AnalyticsError.
"""
from loguru import logger
import os
import sys
from backoffice.config import get_settings

settings = get_settings()

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def setup_logger():
    """Configure logger with appropriate settings"""
    logger.remove()  # Remove default handler

    # Console logging
    logger.add(
        sys.stdout,
        colorize=True,
        format=CONSOLE_FORMAT,
        level=settings.log_level
    )

    # Application log
    logger.add(
        os.path.join(settings.log_dir, "backoffice_{time:YYYY-MM-DD}.log"),
        rotation="00:00",
        retention="30 days",
        compression="zip",
        level="INFO"
    )

    # Error log, with variable values in tracebacks outside production
    logger.add(
        os.path.join(settings.log_dir, "errors_{time:YYYY-MM-DD}.log"),
        rotation="00:00",
        retention="90 days",
        level="ERROR",
        backtrace=True,
        diagnose=settings.environment != "production"
    )

    return logger


# Initialize logger
log = setup_logger()
