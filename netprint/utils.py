import logging
import logging.handlers
import os
import re
import sys
import threading
from contextlib import contextmanager
from typing import List, Optional, Union

from .config.settings import settings

# Global logger instance
logger = logging.getLogger(__name__)

def setup_logging(log_level: Optional[str] = None, log_file: Optional[str] = None) -> logging.Logger:

    # Determine log level
    level = log_level or settings.LOG_LEVEL
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Clear existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    file_path = log_file or settings.LOG_FILE
    if file_path:
        try:
            directory = os.path.dirname(file_path)
            if directory:
                os.makedirs(directory, exist_ok=True)

            # Rotating file handler to prevent huge log files
            file_handler = logging.handlers.RotatingFileHandler(
                file_path, maxBytes=10*1024*1024, backupCount=5
            )
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)

            logger.info(f"Logging to file: {file_path}")

        except OSError as e:
            logger.warning(f"Failed to setup file logging: {e}")

    # zeroconf y urllib3 son muy verbosos en DEBUG
    logging.getLogger('zeroconf').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)

    logger.info(f"Logging initialized - Level: {level}")
    return root_logger

def validate_configuration() -> bool:
    logger.info("Validating configuration...")

    errors = settings.validate_config()
    if errors:
        logger.error("Configuration validation failed:")
        for error in errors:
            logger.error(f"  - {error}")
        return False

    logger.info("Configuration validation passed")
    return True

class ReadWriteLock:
    """Many concurrent readers or one writer.

    Writers wait for active readers to leave, and new readers wait while a writer
    is waiting, so a steady stream of readers cannot starve a snapshot swap.
    """

    def __init__(self):
        self._condition = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    def acquire_read(self):
        with self._condition:
            while self._writer or self._writers_waiting:
                self._condition.wait()
            self._readers += 1

    def release_read(self):
        with self._condition:
            self._readers -= 1
            if self._readers == 0:
                self._condition.notify_all()

    def acquire_write(self):
        with self._condition:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._condition.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True

    def release_write(self):
        with self._condition:
            self._writer = False
            self._condition.notify_all()

    @contextmanager
    def read_locked(self):
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self):
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()

_DIGITS = re.compile(r'(\d+)')

# "Printer 2" antes que "Printer 10"
def natural_sort_key(text: str) -> List[Union[int, str]]:
    return [int(part) if part.isdigit() else part.casefold() for part in _DIGITS.split(text)]

def format_bytes(size: float) -> str:
    for unit in ['B', 'KB', 'MB', 'GB']:
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TB"
