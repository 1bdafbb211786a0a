"""
MODULE: logger
RESPONSIBILITY: Centralized Loguru configuration.
ALLOWED: Configuring loguru, exporting `logger` object.
FORBIDDEN: Business logic, re-configuring logger in other modules.
ERRORS: OSError (if log directory creation fails).

Centralized logging setup through Loguru.
Sinks are configured here only; other modules just `from loguru import logger`.
"""
import sys
from pathlib import Path
from loguru import logger

from config.settings import AppConfig

_CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
_FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message} | {extra}"


def configure_logging(app_config: AppConfig, file_sinks: bool = True) -> None:
    """
    Install the console and file sinks

    Args:
        app_config: Log level, directory, rotation and retention
        file_sinks: Write app.log / errors.log next to the console output
    """
    # Drop the default handler
    logger.remove()

    # Console output
    logger.add(
        sys.stderr,
        format=_CONSOLE_FORMAT,
        level=app_config.log_level,
        colorize=True,
    )

    if not file_sinks:
        return

    log_dir = Path(app_config.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    # Application log (DEBUG and above)
    logger.add(
        log_dir / "app.log",
        format=_FILE_FORMAT,
        level="DEBUG",
        rotation=app_config.log_rotation,
        retention=app_config.log_retention,
        compression="zip",
        enqueue=True,
    )

    # Error log (ERROR and above)
    logger.add(
        log_dir / "errors.log",
        format=_FILE_FORMAT,
        level="ERROR",
        rotation=app_config.log_rotation,
        retention="90 days",
        compression="zip",
        backtrace=True,
        diagnose=False,
        enqueue=True,
    )


__all__ = ["logger", "configure_logging"]
