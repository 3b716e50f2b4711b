"""
Operation logger - Structured logging for Comax operations

Emits 'message | {json}' lines so each operation start and outcome can be
grepped and parsed. Handlers are configured once per process by
configure_logging(); stdout is never used because the MCP stdio transport
owns it.
"""

import json
import logging
import os
import sys
from datetime import datetime
from typing import Any, Optional

from app.comax_client.models import OperationResult

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Never written to a structured line, whatever the caller passes
SENSITIVE_KEYS = frozenset(
    {"password", "loginpassword", "token", "tokenlogin", "credittokennumber", "creditcardnumber"}
)


def configure_logging(level: Optional[str] = None) -> None:
    """Route all logging to stderr at COMAX_LOG_LEVEL (default INFO)."""
    level_name = (level or os.getenv("COMAX_LOG_LEVEL") or "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )


def _scrub(data: dict) -> dict:
    return {k: v for k, v in data.items() if k.lower() not in SENSITIVE_KEYS}


class OperationLogger:
    """Structured logger for Comax tool operations."""

    def __init__(self, name: str = "comax.operations"):
        self.name = name
        self.logger = logging.getLogger(name)

    def _emit(self, level: int, message: str, data: dict):
        if data:
            payload = json.dumps(_scrub(data), default=str, ensure_ascii=False)
            self.logger.log(level, f"{message} | {payload}")
        else:
            self.logger.log(level, message)

    def info(self, message: str, **kwargs):
        """Log info message with optional structured data."""
        self._emit(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message with optional structured data."""
        self._emit(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        """Log error message with optional structured data."""
        self._emit(logging.ERROR, message, kwargs)

    def log_operation(self, operation: str, status: str, **data: Any):
        """Log an operation step with structured data."""
        self.info(
            f"Operation: {operation} - {status}",
            operation=operation,
            status=status,
            timestamp=datetime.now().isoformat(),
            **data,
        )

    def log_result(self, result: OperationResult, duration: float):
        """Log the outcome of one operation."""
        if result.success:
            self.log_operation(result.operation, "SUCCESS", duration=round(duration, 3))
        else:
            self.warning(
                f"Operation failed: {result.operation}",
                operation=result.operation,
                status="FAILED",
                stage=result.stage,
                error=result.error,
                duration=round(duration, 3),
            )


_global_logger: Optional[OperationLogger] = None


def get_logger() -> OperationLogger:
    """Get or create the process-wide operation logger."""
    global _global_logger
    if _global_logger is None:
        _global_logger = OperationLogger()
    return _global_logger
