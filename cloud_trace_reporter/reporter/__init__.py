"""
Reporter

Assemblage et cycle de vie du reporter Cloud Trace:
- Configuration immuable validée (pydantic), chargeable depuis YAML
- Construction avec vérification de connectivité
- report / flush / shutdown / diagnostics
"""

from .config import (
    BackoffPolicy,
    ReporterConfig,
    build_config,
    # Exceptions
    ReporterError,
    ConfigurationError,
)
from .config_loader import ReporterConfigLoader
from .reporter import TraceReporter
from .builder import (
    build_reporter,
    create_reporter,
    # Exceptions
    ConnectivityError,
)

__all__ = [
    # Models
    "BackoffPolicy",
    "ReporterConfig",
    # Implementations
    "ReporterConfigLoader",
    "TraceReporter",
    # Factories
    "build_config",
    "build_reporter",
    "create_reporter",
    # Exceptions
    "ReporterError",
    "ConfigurationError",
    "ConnectivityError",
]
