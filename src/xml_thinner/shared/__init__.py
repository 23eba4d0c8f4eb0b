"""Shared utilities for XML thinning.

This module provides configuration objects, result and diagnostic types, and
logging helpers used across the event, tree, API and CLI layers.
"""

from .result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    PerformanceMetrics,
)
from .config import (
    ApiConfig,
    AttributeMergePolicy,
    ChildOrder,
    ConfigError,
    ConfigValidationError,
    EventBackend,
    SourceConfig,
    TextMergePolicy,
    ThinningConfig,
    TreeConfig,
)
from .logging import (
    CorrelationLogger,
    configure_logging,
    get_logger,
)

__all__ = [
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "PerformanceMetrics",
    "ApiConfig",
    "AttributeMergePolicy",
    "ChildOrder",
    "ConfigError",
    "ConfigValidationError",
    "EventBackend",
    "SourceConfig",
    "TextMergePolicy",
    "ThinningConfig",
    "TreeConfig",
    "CorrelationLogger",
    "configure_logging",
    "get_logger",
]
