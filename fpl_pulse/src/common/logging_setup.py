"""
Logging setup for FPL Pulse.

Provides centralized logging configuration with console and optional
rotating file output.
"""

import logging
import logging.handlers
import sys
import time
from pathlib import Path
from typing import Optional
from .config import get_config


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    force: bool = False
) -> None:
    """
    Setup logging configuration.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_file: Custom log file path (enables file output)
        force: Force reconfiguration even if already setup
    """
    # Don't setup multiple times unless forced
    if logging.getLogger().handlers and not force:
        return

    config = get_config()

    log_level = (level or config.get("logging.level", "INFO")).upper()
    log_format = config.get(
        "logging.format",
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    file_enabled = log_file is not None or config.get("logging.file_enabled", False)
    console_enabled = config.get("logging.console_enabled", True)
    max_bytes = config.get("logging.max_bytes", 10485760)  # 10MB
    backup_count = config.get("logging.backup_count", 5)

    formatter = logging.Formatter(log_format)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level))

    if force:
        root_logger.handlers.clear()

    if console_enabled and not any(isinstance(h, logging.StreamHandler) for h in root_logger.handlers):
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        console_handler.setLevel(getattr(logging, log_level))
        root_logger.addHandler(console_handler)

    if file_enabled:
        if log_file is None:
            log_path = config.project_root / config.get("logging.file", "logs/fpl_pulse.log")
        else:
            log_path = Path(log_file)

        log_path.parent.mkdir(parents=True, exist_ok=True)

        if not any(isinstance(h, logging.handlers.RotatingFileHandler) for h in root_logger.handlers):
            file_handler = logging.handlers.RotatingFileHandler(
                log_path,
                maxBytes=max_bytes,
                backupCount=backup_count
            )
            file_handler.setFormatter(formatter)
            file_handler.setLevel(getattr(logging, log_level))
            root_logger.addHandler(file_handler)

    # Reduce noise from external libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.debug(f"Logging initialized - Level: {log_level}")


def log_api_call(endpoint: str, status_code: int, duration: float, cached: bool = False):
    """Log API call with timing data."""
    logger = logging.getLogger("fpl_pulse.api")
    cache_status = "CACHED" if cached else "FRESH"
    logger.debug(
        f"API {endpoint} | "
        f"status={status_code} | "
        f"duration={duration:.3f}s | "
        f"cache={cache_status}"
    )


class TimedLogger:
    """
    Context manager that logs how long a block took.

    One record on exit at ``level`` (ERROR if the block raised); the elapsed
    seconds stay available as ``duration``.
    """

    def __init__(self, logger: logging.Logger, message: str, level: int = logging.INFO):
        self.logger = logger
        self.message = message
        self.level = level
        self.start_time = None
        self.duration: Optional[float] = None

    def __enter__(self):
        self.start_time = time.monotonic()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration = time.monotonic() - self.start_time

        if exc_type is None:
            self.logger.log(self.level, f"{self.message} took {self.duration:.3f}s")
        else:
            self.logger.error(f"{self.message} failed after {self.duration:.3f}s: {exc_val}")
