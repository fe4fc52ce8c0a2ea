"""
Logging Configuration
Sets up the package logger and an in-memory collector for the debug panel.
"""
import logging
import sys
from collections import deque
from datetime import datetime
from typing import Deque, Dict, List, Optional, Union


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(level: Union[int, str] = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configures the logger for the 'rvpower' namespace.

    Args:
        level: Logging level (e.g. logging.DEBUG, "INFO")
        log_file: Optional path to save logs to a file.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger("rvpower")
    logger.setLevel(level)

    # Avoid duplicate handlers on Streamlit reruns
    for handler in list(logger.handlers):
        if not isinstance(handler, LogCollector):
            logger.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT, datefmt='%H:%M:%S')

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("Logging initialized.")
    return logger


class LogCollector(logging.Handler):
    """
    Keeps the most recent log records in memory so the UI can offer them
    as a downloadable text file.
    """

    def __init__(self, max_logs: int = 1000, level: int = logging.DEBUG):
        super().__init__(level)
        self.records: Deque[Dict[str, Optional[str]]] = deque(maxlen=max_logs)
        self._start = datetime.now()

    def emit(self, record: logging.LogRecord) -> None:
        created = datetime.fromtimestamp(record.created)
        elapsed_ms = int((created - self._start).total_seconds() * 1000)
        error = None
        if record.exc_info:
            error = logging.Formatter().formatException(record.exc_info)
        self.records.append({
            "timestamp": created.isoformat(timespec="milliseconds"),
            "elapsed": f"{elapsed_ms}ms",
            "component": record.name,
            "level": record.levelname,
            "message": record.getMessage(),
            "error": error,
        })

    def get_logs(self) -> List[Dict[str, Optional[str]]]:
        return list(self.records)

    def clear(self) -> None:
        self.records.clear()

    def as_text(self) -> str:
        blocks = []
        for entry in self.records:
            text = f"[{entry['timestamp']}] [{entry['elapsed']}] [{entry['component']}]"
            if entry["level"] != "INFO":
                text += f" [{entry['level']}]"
            text += f" {entry['message']}"
            if entry["error"]:
                text += f"\n  Error: {entry['error']}"
            blocks.append(text)
        return "\n\n".join(blocks)


def attach_collector(max_logs: int = 1000) -> LogCollector:
    """Attach (or return the existing) collector on the package logger."""
    logger = logging.getLogger("rvpower")
    for handler in logger.handlers:
        if isinstance(handler, LogCollector):
            return handler
    collector = LogCollector(max_logs=max_logs)
    logger.addHandler(collector)
    return collector
