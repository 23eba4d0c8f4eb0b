"""Tests for diagnostics and performance metrics."""

import pytest

from xml_thinner.shared.result import DiagnosticEntry, DiagnosticSeverity, PerformanceMetrics


class TestDiagnosticEntry:
    """Test suite for DiagnosticEntry."""

    def test_creation_and_to_dict(self):
        """Test diagnostic creation and serialization."""
        entry = DiagnosticEntry(
            severity=DiagnosticSeverity.CRITICAL,
            message="Thinning failed",
            component="thinner",
            details={"depth": 2},
        )

        assert entry.timestamp > 0
        assert entry.to_dict() == {
            "severity": "CRITICAL",
            "message": "Thinning failed",
            "component": "thinner",
            "details": {"depth": 2},
        }

    def test_details_omitted_when_empty(self):
        """Test empty details are left out of the dictionary."""
        entry = DiagnosticEntry(DiagnosticSeverity.INFO, "ok", "thinner")
        assert "details" not in entry.to_dict()

    def test_validation(self):
        """Test message and component are required."""
        with pytest.raises(ValueError, match="Diagnostic message cannot be empty"):
            DiagnosticEntry(DiagnosticSeverity.INFO, "", "thinner")

        with pytest.raises(ValueError, match="Diagnostic component cannot be empty"):
            DiagnosticEntry(DiagnosticSeverity.INFO, "message", "")


class TestPerformanceMetrics:
    """Test suite for PerformanceMetrics."""

    def test_derived_values(self):
        """Test events per second and merge ratio."""
        metrics = PerformanceMetrics(
            processing_time_ms=500.0,
            events_processed=1000,
            start_events=40,
            nodes_revisited=30,
        )

        assert metrics.events_per_second == 2000.0
        assert metrics.merge_ratio == 0.75

    def test_zero_guards(self):
        """Test derived values are zero without data."""
        metrics = PerformanceMetrics()

        assert metrics.events_per_second == 0.0
        assert metrics.merge_ratio == 0.0

    def test_to_dict_includes_derived_values(self):
        """Test dictionary output contains counters and derived values."""
        data = PerformanceMetrics(start_events=2, nodes_revisited=1).to_dict()

        assert data["start_events"] == 2
        assert data["merge_ratio"] == 0.5
        assert "events_per_second" in data
