"""Tests for the public thinning API."""

import io
from pathlib import Path

import pytest

from xml_thinner import (
    ThinningConfig,
    XMLThinner,
    thin,
    thin_events,
    thin_file,
    thin_string,
)
from xml_thinner.api import ThinResult
from xml_thinner.events import end, start, text
from xml_thinner.shared import ChildOrder, DiagnosticSeverity, EventBackend
from xml_thinner.tree import (
    MalformedInputError,
    StructuralUnderflowError,
    ThinningError,
    UnterminatedDocumentError,
)

FEED = """<?xml version="1.0"?>
<feed>
  <entry id="1"><title>First</title></entry>
  <entry id="2"><title>Second</title><link href="x"/></entry>
</feed>
"""


class TestSimpleFunctions:
    """Test the module-level thinning functions."""

    def test_thin_string(self):
        """Test thinning XML content."""
        result = thin_string(FEED)

        assert result.success
        assert result.error is None
        assert result.tree.paths() == [
            "/feed",
            "/feed/entry",
            "/feed/entry/title",
            "/feed/entry/link",
        ]
        assert result.tree.find("feed/entry").attributes == {"id": "2"}

    def test_thin_detects_input_types(self, tmp_path: Path):
        """Test thin() accepts content, paths, streams and events."""
        path = tmp_path / "feed.xml"
        path.write_text(FEED, encoding="utf-8")

        from_text = thin(FEED)
        from_bytes = thin(FEED.encode("utf-8"))
        from_path = thin(path)
        from_stream = thin(io.BytesIO(FEED.encode("utf-8")))
        from_events = thin([start("feed"), start("entry"), end(), end()])

        for result in (from_text, from_bytes, from_path, from_stream):
            assert result.success
            assert result.tree.same_shape(from_text.tree)
        assert from_events.tree.paths() == ["/feed", "/feed/entry"]

    def test_thin_unsupported_input(self):
        """Test unsupported inputs produce a failed result."""
        result = thin(42)  # type: ignore[arg-type]

        assert not result.success
        assert isinstance(result.error, TypeError)

    def test_thin_file(self, tmp_path: Path):
        """Test thinning a file given as a string path."""
        path = tmp_path / "doc.xml"
        path.write_bytes(b"<doc><a/><a/><b/></doc>")

        result = thin_file(str(path))

        assert result.success
        assert result.source == str(path)
        assert result.node_count == 3

    def test_thin_file_missing(self, tmp_path: Path):
        """Test missing files produce a CRITICAL diagnostic."""
        result = thin_file(tmp_path / "missing.xml")

        assert not result.success
        assert isinstance(result.error, FileNotFoundError)
        assert "not found" in result.diagnostics[0].message.lower()
        assert result.diagnostics[0].severity is DiagnosticSeverity.CRITICAL

    def test_thin_events(self):
        """Test thinning a raw event stream with text capture."""
        config = ThinningConfig.full_capture()
        events = [start("a"), text("one"), start("b"), end(), text("two"), end()]

        result = thin_events(events, config)

        assert result.tree.find("a").text == "one two"
        assert result.performance.text_events == 2


class TestFailures:
    """Test error reporting through results."""

    def test_malformed_xml(self):
        """Test malformed input fails with location details."""
        result = thin_string("<a>\n<b></a>")

        assert not result.success
        assert result.tree is None
        assert isinstance(result.error, MalformedInputError)
        assert result.error.line == 2
        critical = result.get_diagnostics_by_severity(DiagnosticSeverity.CRITICAL)
        assert len(critical) == 1
        assert critical[0].details["error_type"] == "malformed_input"
        assert critical[0].component == "tree_builder"
        assert result.has_errors()

    def test_underflow_from_events(self):
        """Test an unmatched end event is reported with stack context."""
        result = thin_events([start("a"), end(), end()])

        assert isinstance(result.error, StructuralUnderflowError)
        assert result.error.depth == 1
        assert result.error.path == "/"

    def test_unterminated_events(self):
        """Test leftover open elements are reported."""
        result = thin_events([start("a"), start("b")])

        assert isinstance(result.error, UnterminatedDocumentError)
        assert result.error.path == "/a/b"

    def test_raise_errors(self):
        """Test raise_errors propagates the failure."""
        config = ThinningConfig().override(api__raise_errors=True)

        with pytest.raises(MalformedInputError):
            thin_string("<a><b></a>", config)

    def test_raise_for_error(self):
        """Test raise_for_error returns the tree or raises."""
        assert thin_string("<a/>").raise_for_error().paths() == ["/a"]

        with pytest.raises(UnterminatedDocumentError):
            thin_events([start("a")]).raise_for_error()

    def test_raise_for_error_without_tree(self):
        """Test an empty result raises a thinning error."""
        with pytest.raises(ThinningError, match="no tree"):
            ThinResult().raise_for_error()

    def test_unavailable_backend(self, monkeypatch):
        """Test a missing backend is reported, not treated as malformed input."""
        monkeypatch.setattr(
            "xml_thinner.api.thinner.is_backend_available", lambda backend: False
        )
        config = ThinningConfig().override(source__backend=EventBackend.LXML)

        result = thin_string("<a/>", config)

        assert not result.success
        assert "not installed" in str(result.error)
        assert result.diagnostics[0].component == "event_source"

    def test_unavailable_backend_ignored_for_events(self, monkeypatch):
        """Test ready-made events do not need a parser backend."""
        monkeypatch.setattr(
            "xml_thinner.api.thinner.is_backend_available", lambda backend: False
        )
        config = ThinningConfig().override(source__backend=EventBackend.LXML)

        result = thin_events([start("a"), end()], config)

        assert result.success
        assert result.tree.paths() == ["/a"]


class TestXMLThinner:
    """Test the configured thinner."""

    def test_thin_many_merges_documents(self):
        """Test several documents are merged into one tree."""
        thinner = XMLThinner()

        result = thinner.thin_many([
            "<a><x/></a>",
            b"<a><y/></a>",
            [start("a"), start("x"), start("z"), end(), end(), end()],
        ])

        assert result.success
        assert result.source == "<3 inputs>"
        assert result.tree.paths() == ["/a", "/a/x", "/a/x/z", "/a/y"]
        assert len(result.get_diagnostics_by_severity(DiagnosticSeverity.INFO)) == 3
        assert result.performance.nodes_created == 4

    def test_thin_many_empty(self):
        """Test an empty batch yields an empty tree."""
        result = XMLThinner().thin_many([])

        assert result.success
        assert result.node_count == 0

    def test_thin_many_stops_at_first_failure(self):
        """Test a failing document aborts the batch and names the input."""
        result = XMLThinner().thin_many(["<a/>", "<b><c></b>", "<d/>"])

        assert not result.success
        assert result.source == "<str:10>"
        assert result.tree is None

    def test_diagnostics_can_be_disabled(self):
        """Test per-input INFO diagnostics are optional."""
        config = ThinningConfig().override(api__include_diagnostics=False)

        result = XMLThinner(config).thin("<a/>")

        assert result.diagnostics == []

    def test_statistics(self):
        """Test usage statistics across runs."""
        thinner = XMLThinner()
        thinner.thin("<a/>")
        thinner.thin("<a>")

        stats = thinner.statistics
        assert stats["run_count"] == 2
        assert stats["successful_runs"] == 1
        assert stats["success_rate"] == 0.5

        thinner.reset_statistics()
        assert thinner.statistics["run_count"] == 0

    def test_correlation_id_reaches_diagnostics(self):
        """Test the correlation ID is attached to results."""
        result = XMLThinner(correlation_id="job-7").thin("<a/>")

        assert result.correlation_id == "job-7"
        assert result.diagnostics[0].correlation_id == "job-7"

    def test_config_policies_apply(self):
        """Test tree configuration reaches the builder."""
        config = ThinningConfig.corpus()

        result = XMLThinner(config).thin('<r><z k="1"/><a/><z k="2"/></r>')

        assert result.tree.find("r/z").attributes == {"k": "1"}
        assert result.tree.paths(ChildOrder.ALPHABETICAL) == ["/r", "/r/a", "/r/z"]

    def test_summary(self):
        """Test summary of a successful and a failed run."""
        ok = XMLThinner().thin("<a><b/></a>").summary()

        assert ok["success"] is True
        assert ok["node_count"] == 2
        assert ok["max_depth"] == 2
        assert ok["paths"] == ["/a", "/a/b"]
        assert "error" not in ok

        failed = XMLThinner().thin_events([start("a")]).summary()
        assert failed["success"] is False
        assert failed["error"]["error_type"] == "unterminated_document"
        assert "paths" not in failed
