"""
Logging setup for applications using the paginated API client
"""

import logging
from pathlib import Path
from typing import List, Optional

from .config_loader import ClientConfig

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(level: str = 'INFO', log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure root logging with console output and an optional log file

    Args:
        level: Logging level name, e.g. "INFO" or "DEBUG"
        log_file: Optional path of a file receiving the same records

    Returns:
        The package logger

    Raises:
        ValueError: If the level name is unknown
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown logging level: {level}")

    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    logging.basicConfig(
        level=numeric_level,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True
    )

    package_logger = logging.getLogger('paginated_api')
    package_logger.setLevel(numeric_level)
    return package_logger


def configure_logging_from_config(config: ClientConfig) -> logging.Logger:
    return configure_logging(config.log_level, config.log_file)
