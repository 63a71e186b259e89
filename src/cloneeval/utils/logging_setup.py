"""
Logging setup utilities for cloneeval.
"""
import logging


class ShortNameFormatter(logging.Formatter):
    """Formatter exposing the last component of the logger name as ``short_name``."""

    def format(self, record):
        record.short_name = record.name.rsplit('.', 1)[-1]
        return super().format(record)


def setup_logging(level: str = "WARNING"):
    """Set up logging configuration."""
    handler = logging.StreamHandler()

    # Only messages for INFO level, more detail otherwise
    if level.upper() == "INFO":
        formatter = ShortNameFormatter('%(message)s')
    else:
        formatter = ShortNameFormatter('%(asctime)s - %(short_name)s - %(levelname)s - %(message)s')

    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))
    root_logger.handlers = []  # Clear existing handlers
    root_logger.addHandler(handler)

    # Per-query and per-connection chatter stays at DEBUG only
    if level.upper() in ["INFO", "WARNING"]:
        logging.getLogger('cloneeval.database.connection_manager').setLevel(logging.WARNING)
        logging.getLogger('cloneeval.database.schema_manager').setLevel(logging.WARNING)
        logging.getLogger('cloneeval.matchers.base').setLevel(logging.WARNING)
