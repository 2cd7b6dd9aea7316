"""
Centralized logging configuration for the application
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

from urlbits.config.settings import LOGGING_CONFIG


class ApplicationLogger:
    def __init__(
        self,
        log_dir: Optional[Union[str, Path]] = None,
        logger_name: str = "urlbits",
        verbose: bool = False,
        max_bytes: int = LOGGING_CONFIG['max_bytes'],
        backup_count: int = LOGGING_CONFIG['backup_count']
    ):
        self.log_dir = Path(log_dir).expanduser() if log_dir else None
        self.logger_name = logger_name
        self.verbose = verbose
        self.max_bytes = max_bytes
        self.backup_count = backup_count
        self.logger = self._configure_logger()

    def _configure_logger(self) -> logging.Logger:
        logger = logging.getLogger(self.logger_name)
        logger.handlers.clear()
        logger.setLevel(logging.DEBUG if self.verbose else logging.INFO)
        logger.propagate = False

        formatter = logging.Formatter(LOGGING_CONFIG['format'], datefmt=LOGGING_CONFIG['datefmt'])

        # stdout carries the results, so diagnostics go to stderr
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.INFO if self.verbose else logging.WARNING)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        if self.log_dir is not None:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                filename=self.log_dir / f"{self.logger_name}.log",
                maxBytes=self.max_bytes,
                backupCount=self.backup_count,
                encoding='utf-8',
                errors='backslashreplace'
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

        logging.captureWarnings(True)

        return logger

    def get_logger(self, name: Optional[str] = None) -> logging.Logger:
        if name:
            return self.logger.getChild(name)
        return self.logger
