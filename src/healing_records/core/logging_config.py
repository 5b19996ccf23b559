"""
Logging configuration for the healing record service.

This module provides structured logging configuration with dedicated loggers
for record keeping, feedback and metrics traffic.
"""

import logging
import logging.handlers
import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, Any
from dataclasses import asdict, is_dataclass


class StructuredFormatter(logging.Formatter):
    """Custom formatter for structured JSON logging."""

    EXTRA_FIELDS = (
        'healing_id', 'selector_id', 'result_id', 'session_key',
        'operation', 'duration', 'success', 'error_code', 'metadata'
    )

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured JSON."""
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno
        }

        for name in self.EXTRA_FIELDS:
            if hasattr(record, name):
                log_data[name] = getattr(record, name)

        if record.exc_info:
            log_data['exception'] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info)
            }

        return json.dumps(log_data, default=self._json_serializer)

    def _json_serializer(self, obj):
        """Custom JSON serializer for complex objects."""
        if is_dataclass(obj):
            return asdict(obj)
        elif hasattr(obj, 'isoformat'):  # datetime objects
            return obj.isoformat()
        elif hasattr(obj, '__dict__'):
            return obj.__dict__
        else:
            return str(obj)


class HealingLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter carrying healing record context."""

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        """Merge the adapter context into the record's extra fields."""
        extra = dict(self.extra)
        extra.update(kwargs.get('extra') or {})
        kwargs['extra'] = extra
        return msg, kwargs

    def log_operation_success(self, operation: str, duration: float, **metadata):
        """Log successful completion of a record operation."""
        self.info(f"Completed {operation} successfully", extra={
            'operation': operation,
            'success': True,
            'duration': duration,
            'metadata': metadata
        })

    def log_operation_failure(self, operation: str, duration: float, error: str, error_code: str = None, **metadata):
        """Log failure of a record operation."""
        self.error(f"Failed {operation}: {error}", extra={
            'operation': operation,
            'success': False,
            'duration': duration,
            'error_code': error_code,
            'metadata': metadata
        })


def setup_healing_logging(log_level: str = "INFO", log_dir: str = "logs") -> Dict[str, logging.Logger]:
    """
    Set up structured logging for the healing record service.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_dir: Directory to store log files

    Returns:
        Dictionary of configured loggers
    """
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper()))

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    structured_formatter = StructuredFormatter()
    console_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(console_formatter)
    console_handler.setLevel(getattr(logging, log_level.upper()))

    all_logs_handler = logging.handlers.RotatingFileHandler(
        log_path / "healing_all.log",
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5
    )
    all_logs_handler.setFormatter(structured_formatter)
    all_logs_handler.setLevel(logging.DEBUG)

    error_handler = logging.handlers.RotatingFileHandler(
        log_path / "healing_errors.log",
        maxBytes=5 * 1024 * 1024,  # 5MB
        backupCount=10
    )
    error_handler.setFormatter(structured_formatter)
    error_handler.setLevel(logging.ERROR)

    root_logger.addHandler(console_handler)
    root_logger.addHandler(all_logs_handler)

    loggers = {}

    service_logger = logging.getLogger("healing_records.services")
    service_logger.addHandler(error_handler)
    loggers["services"] = service_logger

    # Metrics gateway traffic gets its own file
    metrics_logger = logging.getLogger("healing_records.services.metrics_gateway")
    metrics_handler = logging.handlers.RotatingFileHandler(
        log_path / "healing_metrics.log",
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5
    )
    metrics_handler.setFormatter(structured_formatter)
    metrics_logger.addHandler(metrics_handler)
    loggers["metrics"] = metrics_logger

    api_logger = logging.getLogger("healing_records.api")
    api_logger.addHandler(error_handler)
    loggers["api"] = api_logger

    logging.getLogger("urllib3").setLevel(logging.WARNING)

    return loggers


def get_healing_logger(name: str, **context) -> HealingLoggerAdapter:
    """Get a logger adapter bound to healing record context."""
    return HealingLoggerAdapter(logging.getLogger(name), context)
