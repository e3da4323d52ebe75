"""
Logging setup and configuration for Webex Room Sync.

Console output always goes to stderr, which is what Lambda forwards to
CloudWatch. A rotating file log is added when a log directory is configured.
Every handler scrubs access tokens before a record is written.
"""

import os
import re
import logging
import logging.handlers
from typing import Dict, Any, Optional


class SensitiveDataFilter(logging.Filter):
    """Filter to scrub sensitive data from log messages."""

    SENSITIVE_KEYWORDS = [
        'token', 'access_token', 'webex_token', 'authorization',
        'password', 'secret', 'client_secret',
    ]

    def filter(self, record):
        """Filter out sensitive data from log records."""
        if record.args:
            record.msg = record.getMessage()
            record.args = None

        msg = str(record.msg)

        # key=value
        for keyword in self.SENSITIVE_KEYWORDS:
            msg = re.sub(rf'({keyword}\s*=\s*)[^\s,}}\]]+', r'\1****', msg, flags=re.IGNORECASE)

        # "key": "value"
        for keyword in self.SENSITIVE_KEYWORDS:
            msg = re.sub(rf'("{keyword}"\s*:\s*")[^"]*(")', r'\1****\2', msg, flags=re.IGNORECASE)

        # Bearer credentials anywhere in the message
        msg = re.sub(r"(Bearer\s+)[^\s,'\"}\]]+", r'\1****', msg, flags=re.IGNORECASE)

        record.msg = msg
        return True


class LoggingManager:
    """Configures the root logger once per process."""

    def __init__(self):
        self.configured = False
        self.log_dir = None
        self.retention_days = 7

    def setup_logging(self, config: Optional[Dict[str, Any]]) -> None:
        """
        Set up logging based on configuration.

        Args:
            config: Logging configuration dictionary (level, log_dir, retention_days)
        """
        if self.configured:
            return

        logging_config = config if config else {}

        log_level = str(logging_config.get('level', 'INFO')).upper()
        self.log_dir = logging_config.get('log_dir')
        self.retention_days = int(logging_config.get('retention_days', 7))
        level = getattr(logging, log_level, logging.INFO)

        root_logger = logging.getLogger()
        root_logger.setLevel(level)
        root_logger.handlers.clear()

        sensitive_filter = SensitiveDataFilter()

        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter(
            '%(asctime)s [%(levelname)s] %(name)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        console_handler.addFilter(sensitive_filter)
        root_logger.addHandler(console_handler)

        if self.log_dir:
            file_handler = self._create_file_handler()
            if file_handler:
                file_handler.setLevel(level)
                file_handler.setFormatter(logging.Formatter(
                    '%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(message)s',
                    datefmt='%Y-%m-%d %H:%M:%S'
                ))
                file_handler.addFilter(sensitive_filter)
                root_logger.addHandler(file_handler)

        self.configured = True

        logger = logging.getLogger(__name__)
        logger.info(f"Logging configured: level={log_level}, dir={self.log_dir}, "
                    f"retention={self.retention_days} days")

    def _create_file_handler(self) -> Optional[logging.Handler]:
        """Create a midnight-rotating handler, or None if the directory is unusable."""
        try:
            os.makedirs(self.log_dir, exist_ok=True)
        except OSError as e:
            logging.getLogger(__name__).warning(f"Could not create log directory {self.log_dir}: {e}")
            return None

        handler = logging.handlers.TimedRotatingFileHandler(
            filename=os.path.join(self.log_dir, 'room_sync.log'),
            when='midnight',
            interval=1,
            backupCount=self.retention_days,
            encoding='utf-8'
        )
        handler.suffix = '%Y-%m-%d'
        return handler


# Global logging manager instance
_logging_manager = LoggingManager()


def setup_logging(config: Optional[Dict[str, Any]]) -> None:
    """
    Convenience function to set up logging.

    Args:
        config: Logging configuration dictionary
    """
    _logging_manager.setup_logging(config)
