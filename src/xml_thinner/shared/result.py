"""Diagnostic and metric types shared by the thinning pipeline.

This module defines the diagnostic entries attached to thinning results and
the performance counters collected while a tree is being built.
"""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Optional


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostic entries."""

    DEBUG = auto()      # Debug-level information
    INFO = auto()       # Informational messages
    WARNING = auto()    # Suspicious but harmless input
    ERROR = auto()      # Input problem that was tolerated
    CRITICAL = auto()   # Build aborted


@dataclass
class DiagnosticEntry:
    """Single diagnostic entry with context information."""

    severity: DiagnosticSeverity
    message: str
    component: str
    details: Optional[Dict[str, Any]] = None
    timestamp: float = field(default_factory=time.time)
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate diagnostic entry."""
        if not self.message:
            raise ValueError("Diagnostic message cannot be empty")
        if not self.component:
            raise ValueError("Diagnostic component cannot be empty")

    def to_dict(self) -> Dict[str, Any]:
        """Convert diagnostic to a JSON-friendly dictionary."""
        result: Dict[str, Any] = {
            "severity": self.severity.name,
            "message": self.message,
            "component": self.component,
        }
        if self.details:
            result["details"] = dict(self.details)
        return result


@dataclass
class PerformanceMetrics:
    """Counters collected during a single thinning build."""

    processing_time_ms: float = 0.0
    events_processed: int = 0
    start_events: int = 0
    text_events: int = 0
    end_events: int = 0
    nodes_created: int = 0
    nodes_revisited: int = 0
    max_depth: int = 0

    @property
    def events_per_second(self) -> float:
        """Calculate events processed per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.events_processed * 1000.0) / self.processing_time_ms

    @property
    def merge_ratio(self) -> float:
        """Share of start events that landed on an already existing node."""
        if self.start_events == 0:
            return 0.0
        return self.nodes_revisited / self.start_events

    def to_dict(self) -> Dict[str, Any]:
        """Convert metrics to a dictionary including derived values."""
        return {
            "processing_time_ms": self.processing_time_ms,
            "events_processed": self.events_processed,
            "start_events": self.start_events,
            "text_events": self.text_events,
            "end_events": self.end_events,
            "nodes_created": self.nodes_created,
            "nodes_revisited": self.nodes_revisited,
            "max_depth": self.max_depth,
            "events_per_second": self.events_per_second,
            "merge_ratio": self.merge_ratio,
        }
