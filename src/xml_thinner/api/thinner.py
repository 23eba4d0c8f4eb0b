"""Public thinning API with progressive disclosure.

Level 1 is a set of module-level functions (:func:`thin`, :func:`thin_string`,
:func:`thin_file`, :func:`thin_events`) that use the default configuration.
Level 2 is :class:`XMLThinner`, a reusable, configured instance that can also
merge several documents into one tree.

All functions return a :class:`ThinResult`. Failures produce a result with
``success=False``, the error and a CRITICAL diagnostic, unless
``ApiConfig.raise_errors`` is set, in which case the error propagates.
"""

import time
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from xml_thinner.events import (
    BackendUnavailableError,
    Event,
    SourceInput,
    XMLEventSource,
    is_backend_available,
)
from xml_thinner.shared import (
    DiagnosticSeverity,
    PerformanceMetrics,
    ThinningConfig,
    get_logger,
)
from xml_thinner.tree import ThinningError, ThinningTreeBuilder, ThinTree

from .result import ThinResult

MS_PER_SECOND = 1000
PREVIEW_LENGTH = 100

_COUNTER_FIELDS = (
    "events_processed",
    "start_events",
    "text_events",
    "end_events",
    "nodes_created",
    "nodes_revisited",
)


def _describe(input_data: Any) -> str:
    if isinstance(input_data, Path):
        return str(input_data)
    if isinstance(input_data, (str, bytes)):
        return f"<{type(input_data).__name__}:{len(input_data)}>"
    return getattr(input_data, "name", type(input_data).__name__)


def _accumulate(total: PerformanceMetrics, part: PerformanceMetrics) -> None:
    for name in _COUNTER_FIELDS:
        setattr(total, name, getattr(total, name) + getattr(part, name))
    total.max_depth = max(total.max_depth, part.max_depth)


class XMLThinner:
    """Configured, reusable thinning front end.

    Attributes:
        config: Active thinning configuration
        correlation_id: Correlation ID attached to logs and diagnostics

    Examples:
        Basic usage:
        >>> thinner = XMLThinner()
        >>> result = thinner.thin("<a><b/><b/></a>")
        >>> result.tree.paths()
        ['/a', '/a/b']

        Merging a corpus:
        >>> result = thinner.thin_many(["<a><x/></a>", "<a><y/></a>"])
        >>> result.tree.paths()
        ['/a', '/a/x', '/a/y']
    """

    def __init__(
        self,
        config: Optional[ThinningConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize thinner.

        Args:
            config: Thinning configuration (defaults to ``ThinningConfig()``)
            correlation_id: Optional correlation ID overriding the config's
        """
        self.config = config or ThinningConfig()
        self.correlation_id = correlation_id or self.config.correlation_id
        self.logger = get_logger(__name__, self.correlation_id, "xml_thinner")

        self._run_count = 0
        self._successful_runs = 0
        self._total_processing_time = 0.0

    @property
    def statistics(self) -> Dict[str, Any]:
        """Usage statistics of this instance."""
        return {
            "run_count": self._run_count,
            "successful_runs": self._successful_runs,
            "success_rate": (
                self._successful_runs / self._run_count if self._run_count else 0.0
            ),
            "total_processing_time_ms": self._total_processing_time,
        }

    def reset_statistics(self) -> None:
        self._run_count = 0
        self._successful_runs = 0
        self._total_processing_time = 0.0

    def thin(self, input_data: Union[SourceInput, Iterable[Event]]) -> ThinResult:
        """Thin one document from content, a Path, a file-like object or events."""
        if isinstance(input_data, (str, bytes, Path)) or hasattr(input_data, "read"):
            return self._run([input_data], _describe(input_data))
        if hasattr(input_data, "__iter__"):
            return self.thin_events(input_data)

        result = self._new_result(_describe(input_data))
        error = TypeError(
            f"Unsupported input type: {type(input_data).__name__}"
        )
        return self._finish(result, error=error, component="api")

    def thin_string(self, xml: Union[str, bytes]) -> ThinResult:
        """Thin XML content given as a string or bytes."""
        self.logger.debug(
            "Thinning string content",
            extra={
                "content_length": len(xml),
                "preview": xml[:PREVIEW_LENGTH] if isinstance(xml, str) else None,
            }
        )
        return self._run([xml], _describe(xml))

    def thin_file(self, file_path: Union[str, Path]) -> ThinResult:
        """Thin an XML file."""
        path = Path(file_path)
        return self._run([path], str(path))

    def thin_events(self, events: Iterable[Event]) -> ThinResult:
        """Thin an already produced event stream."""
        return self._run([events], "<events>", raw_events=True)

    def thin_many(
        self, inputs: Iterable[Union[SourceInput, Iterable[Event]]]
    ) -> ThinResult:
        """Thin several documents into one merged tree.

        The first failing input aborts the whole batch.
        """
        items = list(inputs)
        description = f"<{len(items)} inputs>"
        return self._run(items, description)

    def _new_result(self, description: str) -> ThinResult:
        return ThinResult(source=description, correlation_id=self.correlation_id)

    def _events_for(self, item: Any, raw_events: bool) -> Iterable[Event]:
        if raw_events:
            return item
        if isinstance(item, (str, bytes, Path)) or hasattr(item, "read"):
            if isinstance(item, Path) and not item.is_file():
                raise FileNotFoundError(f"File not found: {item}")
            return XMLEventSource(item, self.config.source, self.correlation_id)
        if hasattr(item, "__iter__"):
            return item
        raise TypeError(f"Unsupported input type: {type(item).__name__}")

    def _run(
        self,
        items: List[Any],
        description: str,
        raw_events: bool = False
    ) -> ThinResult:
        start_time = time.time()
        result = self._new_result(description)
        self._run_count += 1

        self.logger.info(
            "Starting thinning run",
            extra={"source": description, "input_count": len(items)}
        )

        if not raw_events and not is_backend_available(self.config.source.backend):
            error = BackendUnavailableError(
                f"Event backend {self.config.source.backend.name} is not installed"
            )
            return self._finish(result, start_time, error=error, component="event_source")

        builder = ThinningTreeBuilder(self.config.tree, self.correlation_id)
        tree: Optional[ThinTree] = None

        for item in items:
            label = _describe(item)
            try:
                tree = builder.build(self._events_for(item, raw_events), tree)
            except ThinningError as e:
                _accumulate(result.performance, builder.metrics)
                result.source = label if len(items) > 1 else description
                return self._finish(result, start_time, error=e, component="tree_builder")
            except (OSError, TypeError) as e:
                result.source = label if len(items) > 1 else description
                return self._finish(result, start_time, error=e, component="api")

            _accumulate(result.performance, builder.metrics)
            if self.config.api.include_diagnostics:
                result.add_diagnostic(
                    DiagnosticSeverity.INFO,
                    f"Thinned {label}",
                    "xml_thinner",
                    details={
                        "events_processed": builder.metrics.events_processed,
                        "nodes_created": builder.metrics.nodes_created,
                    }
                )

        if tree is None:
            builder.begin()
            tree = builder.close()
        result.tree = tree
        return self._finish(result, start_time)

    def _finish(
        self,
        result: ThinResult,
        start_time: Optional[float] = None,
        error: Optional[BaseException] = None,
        component: str = "xml_thinner"
    ) -> ThinResult:
        if start_time is not None:
            elapsed = (time.time() - start_time) * MS_PER_SECOND
            result.performance.processing_time_ms = elapsed
            self._total_processing_time += elapsed

        if error is None:
            self._successful_runs += 1
            self.logger.info(
                "Thinning run completed",
                extra={
                    "source": result.source,
                    "node_count": result.node_count,
                    "processing_time_ms": result.processing_time_ms,
                }
            )
            return result

        details = (
            error.to_details() if isinstance(error, ThinningError)
            else {"error_type": type(error).__name__}
        )
        self.logger.error(
            "Thinning run failed",
            extra={"source": result.source, "error": str(error), **details}
        )
        if self.config.api.raise_errors:
            raise error

        result.success = False
        result.error = error
        result.tree = None
        result.add_diagnostic(
            DiagnosticSeverity.CRITICAL,
            f"Thinning failed: {error}",
            component,
            details=details,
        )
        return result


def thin(
    input_data: Union[SourceInput, Iterable[Event]],
    config: Optional[ThinningConfig] = None,
    correlation_id: Optional[str] = None
) -> ThinResult:
    """Thin XML from any supported input with automatic type detection.

    Strings and bytes are treated as XML content; pass a :class:`Path` (or use
    :func:`thin_file`) for files.

    Args:
        input_data: XML content, Path, file-like object, or event iterable
        config: Optional thinning configuration
        correlation_id: Optional correlation ID for request tracking

    Returns:
        ThinResult with the thinned tree and run metadata

    Examples:
        >>> result = thin('<feed><entry><id/></entry><entry><title/></entry></feed>')
        >>> result.success
        True
        >>> result.tree.paths()
        ['/feed', '/feed/entry', '/feed/entry/id', '/feed/entry/title']
    """
    return XMLThinner(config, correlation_id).thin(input_data)


def thin_string(
    xml: Union[str, bytes],
    config: Optional[ThinningConfig] = None,
    correlation_id: Optional[str] = None
) -> ThinResult:
    """Thin XML content given as a string or bytes."""
    return XMLThinner(config, correlation_id).thin_string(xml)


def thin_file(
    file_path: Union[str, Path],
    config: Optional[ThinningConfig] = None,
    correlation_id: Optional[str] = None
) -> ThinResult:
    """Thin an XML file.

    Examples:
        >>> result = thin_file('missing.xml')
        >>> result.success
        False
        >>> 'not found' in result.diagnostics[0].message.lower()
        True
    """
    return XMLThinner(config, correlation_id).thin_file(file_path)


def thin_events(
    events: Iterable[Event],
    config: Optional[ThinningConfig] = None,
    correlation_id: Optional[str] = None
) -> ThinResult:
    """Thin a stream of structural events."""
    return XMLThinner(config, correlation_id).thin_events(events)
