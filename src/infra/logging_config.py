"""
Logging configuration module.

Daily log rotation with process start time tracking.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

# Logger shared by the CLI and every "src.*" module logger
LOGGER_NAME = "cf_task_scheduler"
LOG_FILE_PREFIX = "cf_task"

# Process start time is captured once and reused for all daily logs
_PROCESS_START_TIME: Optional[str] = None


class DailyRotatingFileHandler(logging.FileHandler):
    """
    Daily rotating file handler.

    Creates one log file per calendar day with format:
    logs/<prefix>_YYYYMMDD_<START_HHMMSS>.log

    START_HHMMSS is fixed at process start, only YYYYMMDD changes. A task
    that polls across midnight keeps logging into the new day's file.
    """

    def __init__(
        self,
        log_dir: str = "logs",
        encoding: str = "utf-8",
        prefix: str = LOG_FILE_PREFIX,
        clock: Callable[[], datetime] = datetime.now,
    ):
        global _PROCESS_START_TIME

        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.prefix = prefix
        self._clock = clock

        if _PROCESS_START_TIME is None:
            _PROCESS_START_TIME = clock().strftime("%H%M%S")

        self._start_hhmmss = _PROCESS_START_TIME
        self._current_date = self._today()

        super().__init__(self._log_path(self._current_date), mode='a', encoding=encoding)

    def _today(self) -> str:
        return self._clock().strftime("%Y%m%d")

    def _log_path(self, date_str: str) -> str:
        return str(self.log_dir / f"{self.prefix}_{date_str}_{self._start_hhmmss}.log")

    def emit(self, record: logging.LogRecord) -> None:
        """Emit a record, switching to a new file when the date changed."""
        today = self._today()

        if today != self._current_date:
            self.close()
            self.baseFilename = self._log_path(today)
            self._current_date = today
            self.stream = self._open()

        super().emit(record)


def setup_logging(log_level: str = "INFO", log_dir: str = "logs") -> logging.Logger:
    """
    Configure logging and return the application logger.

    Records from module loggers under "src" (scheduler, cloudfoundry,
    infra) go to the same handlers.

    Format: logs/cf_task_YYYYMMDD_<START_HHMMSS>.log (see LOG_FILE_PREFIX)

    Args:
        log_level (str): Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir (str): Directory for daily log files

    Returns:
        logging.Logger: Configured logger instance
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    console_handler = logging.StreamHandler()
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)

    file_handler = DailyRotatingFileHandler(log_dir=log_dir, encoding='utf-8')
    file_handler.setLevel(numeric_level)
    file_handler.setFormatter(formatter)

    for name in (LOGGER_NAME, "src"):
        target = logging.getLogger(name)
        target.setLevel(numeric_level)
        # Prevent propagation to root logger (avoid duplicate logs)
        target.propagate = False
        # Remove existing handlers (prevent duplicates)
        if target.handlers:
            target.handlers.clear()
        target.addHandler(console_handler)
        target.addHandler(file_handler)

    logger = logging.getLogger(LOGGER_NAME)
    logger.info(f"Logging started - level: {log_level}, log file: {file_handler.baseFilename}")

    return logger
