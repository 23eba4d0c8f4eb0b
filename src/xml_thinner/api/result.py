"""Result object returned by the public thinning API."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from xml_thinner.shared import (
    ChildOrder,
    DiagnosticEntry,
    DiagnosticSeverity,
    PerformanceMetrics,
)
from xml_thinner.tree import ThinningError, ThinTree


@dataclass
class ThinResult:
    """Outcome of one thinning run.

    Completion is all-or-nothing: a failed run carries the error and
    diagnostics but no tree.
    """

    tree: Optional[ThinTree] = None
    success: bool = True
    error: Optional[BaseException] = None

    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    performance: PerformanceMetrics = field(default_factory=PerformanceMetrics)

    source: Optional[str] = None
    correlation_id: Optional[str] = None

    @property
    def node_count(self) -> int:
        return self.tree.node_count if self.tree else 0

    @property
    def max_depth(self) -> int:
        return self.tree.max_depth if self.tree else 0

    @property
    def processing_time_ms(self) -> float:
        return self.performance.processing_time_ms

    def add_diagnostic(
        self,
        severity: DiagnosticSeverity,
        message: str,
        component: str,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Add diagnostic entry to result."""
        self.diagnostics.append(
            DiagnosticEntry(
                severity=severity,
                message=message,
                component=component,
                details=details,
                correlation_id=self.correlation_id,
            )
        )

    def get_diagnostics_by_severity(
        self, severity: DiagnosticSeverity
    ) -> List[DiagnosticEntry]:
        """Get diagnostics of specific severity level."""
        return [diag for diag in self.diagnostics if diag.severity == severity]

    def has_errors(self) -> bool:
        """Check if result contains any error diagnostics."""
        return any(
            diag.severity in (DiagnosticSeverity.ERROR, DiagnosticSeverity.CRITICAL)
            for diag in self.diagnostics
        )

    def raise_for_error(self) -> ThinTree:
        """Return the tree, or re-raise the error of a failed run."""
        if self.error is not None:
            raise self.error
        if self.tree is None:
            raise ThinningError("Thinning produced no tree")
        return self.tree

    def summary(self, order: ChildOrder = ChildOrder.FIRST_SEEN) -> Dict[str, Any]:
        """Get summary statistics for the run."""
        summary: Dict[str, Any] = {
            "source": self.source,
            "success": self.success,
            "node_count": self.node_count,
            "max_depth": self.max_depth,
            "performance": self.performance.to_dict(),
            "diagnostics": [diag.to_dict() for diag in self.diagnostics],
        }
        if self.tree is not None:
            summary["paths"] = self.tree.paths(order)
        if isinstance(self.error, ThinningError):
            summary["error"] = {"message": str(self.error), **self.error.to_details()}
        elif self.error is not None:
            summary["error"] = {
                "message": str(self.error),
                "error_type": type(self.error).__name__,
            }
        return summary
