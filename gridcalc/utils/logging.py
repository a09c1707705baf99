import sys
from pathlib import Path
from typing import Optional, Union

from loguru import logger


def configure_logging(level: str = "INFO", log_file: Optional[Union[str, Path]] = None):
    """
    Configure loguru for gridcalc with console and optional file logging.

    Args:
        level: Console log level
        log_file: Optional path of a rotating DEBUG log file
    """
    # Remove default handler
    logger.remove()

    logger.add(
        sys.stderr,
        level=level.upper(),
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
               "<level>{level: <8}</level> | "
               "<cyan>{name}</cyan>:<cyan>{function}</cyan> - "
               "<level>{message}</level>"
    )

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path,
            level="DEBUG",
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message}",
            rotation="10 MB",
            retention="7 days"
        )


def get_run_logger(name: str):
    """
    Get a logger bound with a strategy name for structured logging.

    Args:
        name: Strategy name (e.g., "main", "aggressive")

    Returns:
        Loguru logger with strategy context
    """
    return logger.bind(strategy=name)
