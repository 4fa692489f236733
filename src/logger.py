"""
Logging Setup Module.

Builds the application logger used across all modules. Log records are
plain dicts (``logger.info({"message": ..., "repository": ...})``) so that
they can be written as structured JSON to the log file while staying
readable on the console.

Features:
- Human readable console output
- Rotating JSON log file via python-json-logger
- Development mode with verbose console output
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from pythonjsonlogger.json import JsonFormatter


class StructuredJsonFormatter(JsonFormatter):
    """JSON formatter that always records level and logger name."""

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name


class LogManager:
    """
    Creates and configures a named application logger.

    Attributes:
        logger (logging.Logger): The configured logger instance
    """

    CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

    def __init__(
        self,
        app_name: str,
        log_dir: Optional[str] = "logs",
        development: bool = False,
        level: int = logging.INFO,
        max_bytes: int = 5 * 1024 * 1024,
        backup_count: int = 3,
    ):
        """
        Initialize the log manager.

        Args:
            app_name (str): Logger name, also used as the log file name
            log_dir (Optional[str]): Directory for the JSON log file, None disables file logging
            development (bool): Log everything to the console when True
            level (int): Logging level for the logger and file handler
            max_bytes (int): Size at which the log file is rotated
            backup_count (int): Number of rotated log files to keep
        """
        self.logger = logging.getLogger(app_name)
        self.logger.setLevel(level)
        self.logger.propagate = False
        self.logger.handlers.clear()

        console_handler = logging.StreamHandler()
        console_handler.setLevel(level if development else max(level, logging.INFO))
        console_handler.setFormatter(
            logging.Formatter(self.CONSOLE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
        )
        self.logger.addHandler(console_handler)

        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
            file_handler = RotatingFileHandler(
                os.path.join(log_dir, f"{app_name}.jsonl"),
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(StructuredJsonFormatter(self.JSON_FORMAT))
            self.logger.addHandler(file_handler)
