"""
Logging

Logging structuré JSON des diagnostics du reporter:
- Une ligne JSON par entrée
- Timestamp ISO 8601 UTC
- Niveaux DEBUG, INFO, WARN, ERROR, CRITICAL
- Buffer borné des dernières entrées, interrogeable
"""

from .interfaces import (
    # Enums
    LogLevel,
    # Dataclasses
    LogEntry,
    LogConfig,
    # Interfaces
    IStructuredLogger,
)
from .structured_logger import (
    StructuredLogger,
    parse_log_level,
    # Exceptions
    InvalidLogLevelError,
)

__all__ = [
    # Enums
    "LogLevel",
    # Dataclasses
    "LogEntry",
    "LogConfig",
    # Interfaces
    "IStructuredLogger",
    # Implementations
    "StructuredLogger",
    "parse_log_level",
    # Exceptions
    "InvalidLogLevelError",
]
