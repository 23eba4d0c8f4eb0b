"""Event sources that turn XML input into structural events.

The source drives an incremental pull parser and translates its element
start/end notifications into :class:`StartEvent`, :class:`TextEvent` and
:class:`EndEvent` records. Input is fed in chunks, and subtrees are detached
from the parser's element tree once they have been reported. An element
stays attached to its parent until the parent closes, so memory is bounded by
the open elements and their direct children rather than by document size.

Namespaced names are reported by their local part unless
``SourceConfig.keep_namespaces`` asks for the parser's ``{uri}local`` form.

Lexical well-formedness is the parser's job: any parser error surfaces as a
:class:`SourceError` and ends the event stream.
"""

import importlib
import io
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, BinaryIO, Iterator, Optional, TextIO, Tuple, Type, Union

from xml_thinner.shared import EventBackend, SourceConfig, get_logger

from .events import EndEvent, Event, StartEvent, TextEvent

SourceInput = Union[str, bytes, Path, BinaryIO, TextIO]

_PULL_EVENTS = ("start", "end")


class SourceError(Exception):
    """Raised when the event source cannot produce a valid event stream."""

    def __init__(
        self,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None
    ) -> None:
        super().__init__(message)
        self.line = line
        self.column = column

    @property
    def position(self) -> Optional[Tuple[int, int]]:
        """Line and column of the failure, when the parser reported one."""
        if self.line is None or self.column is None:
            return None
        return (self.line, self.column)


class BackendUnavailableError(SourceError):
    """Raised when the requested parser backend is not installed."""


def is_backend_available(backend: EventBackend) -> bool:
    """Check whether the parser library behind ``backend`` can be imported."""
    if backend is EventBackend.ELEMENTTREE:
        return True
    try:
        importlib.import_module("lxml.etree")
    except ImportError:
        return False
    return True


def _create_pull_parser(backend: EventBackend) -> Tuple[Any, Tuple[Type[BaseException], ...]]:
    """Create a pull parser and the exception types it raises for bad input."""
    if backend is EventBackend.ELEMENTTREE:
        return ET.XMLPullParser(events=_PULL_EVENTS), (ET.ParseError,)

    if backend is EventBackend.LXML:
        try:
            lxml_etree = importlib.import_module("lxml.etree")
        except ImportError as e:
            raise BackendUnavailableError(
                "The lxml backend was requested but lxml is not installed; "
                "install the 'lxml' extra or use the ELEMENTTREE backend"
            ) from e
        return lxml_etree.XMLPullParser(events=_PULL_EVENTS), (lxml_etree.ParseError,)

    raise BackendUnavailableError(f"Unsupported event backend: {backend}")


def _local_name(name: str) -> str:
    """Strip the ``{uri}`` prefix the parsers put on namespaced names."""
    if name.startswith("{"):
        return name.rsplit("}", 1)[1]
    return name


def _is_element(node: Any) -> bool:
    # lxml reports comments and processing instructions as children whose tag
    # is a factory function rather than a string.
    return isinstance(node.tag, str)


class XMLEventSource:
    """Single-use iterator of structural events over one XML document.

    Examples:
        >>> source = XMLEventSource("<a><b>hi</b></a>")
        >>> [e.type.name for e in source]
        ['START', 'START', 'TEXT', 'END', 'END']
    """

    def __init__(
        self,
        source: SourceInput,
        config: Optional[SourceConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize event source.

        Args:
            source: XML content (str or bytes), a Path, or a file-like object
            config: Source configuration (backend, chunk size, encoding)
            correlation_id: Optional correlation ID for request tracking
        """
        self.source = source
        self.config = config or SourceConfig()
        self.logger = get_logger(__name__, correlation_id, "event_source")
        self._consumed = False
        self.events_emitted = 0

    @property
    def description(self) -> str:
        """Short human-readable label of the input."""
        if isinstance(self.source, Path):
            return str(self.source)
        if isinstance(self.source, (str, bytes)):
            return f"<{type(self.source).__name__}:{len(self.source)}>"
        return getattr(self.source, "name", type(self.source).__name__)

    def __iter__(self) -> Iterator[Event]:
        if self._consumed:
            raise SourceError("Event source has already been consumed")
        self._consumed = True
        return self._generate()

    def _iter_chunks(self) -> Iterator[Union[str, bytes]]:
        chunk_size = self.config.chunk_size

        if isinstance(self.source, (str, bytes)):
            for offset in range(0, len(self.source), chunk_size):
                yield self.source[offset:offset + chunk_size]
            return

        if isinstance(self.source, Path):
            if self.config.encoding:
                stream: Any = self.source.open("r", encoding=self.config.encoding)
            else:
                stream = self.source.open("rb")
            with stream:
                yield from self._read_stream(stream, chunk_size)
            return

        if hasattr(self.source, "read"):
            yield from self._read_stream(self.source, chunk_size)
            return

        raise SourceError(
            f"Unsupported input type for event source: {type(self.source).__name__}"
        )

    @staticmethod
    def _read_stream(
        stream: Union[BinaryIO, TextIO, io.IOBase], chunk_size: int
    ) -> Iterator[Union[str, bytes]]:
        while True:
            chunk = stream.read(chunk_size)
            if not chunk:
                return
            yield chunk

    def _generate(self) -> Iterator[Event]:
        parser, parse_errors = _create_pull_parser(self.config.backend)

        self.logger.debug(
            "Starting event stream",
            extra={
                "input": self.description,
                "backend": self.config.backend.name,
                "chunk_size": self.config.chunk_size,
            }
        )

        saw_root = False
        try:
            for chunk in self._iter_chunks():
                parser.feed(chunk)
                for event in self._drain(parser):
                    saw_root = True
                    yield event
            parser.close()
            for event in self._drain(parser):
                saw_root = True
                yield event
        except parse_errors as e:
            line, column = getattr(e, "position", None) or (None, None)
            raise SourceError(
                f"Malformed XML in {self.description}: {e}", line=line, column=column
            ) from e
        except (OSError, UnicodeDecodeError) as e:
            raise SourceError(f"Unable to read {self.description}: {e}") from e

        if not saw_root:
            raise SourceError(f"No root element found in {self.description}")

        self.logger.debug(
            "Event stream finished",
            extra={"input": self.description, "events_emitted": self.events_emitted}
        )

    def _drain(self, parser: Any) -> Iterator[Event]:
        for action, element in parser.read_events():
            if not _is_element(element):
                continue
            if action == "start":
                self.events_emitted += 1
                yield StartEvent(
                    self._name(element.tag),
                    {self._name(key): value for key, value in element.attrib.items()}
                )
            else:
                yield from self._close_element(element)

    def _name(self, name: str) -> str:
        return name if self.config.keep_namespaces else _local_name(name)

    def _close_element(self, element: Any) -> Iterator[Event]:
        if element.text:
            self.events_emitted += 1
            yield TextEvent(element.text)
        for child in element:
            if child.tail:
                self.events_emitted += 1
                yield TextEvent(child.tail)
        self.events_emitted += 1
        yield EndEvent(self._name(element.tag))
        # Children are fully reported; the element itself stays attached
        # because its tail belongs to the parent's close.
        del element[:]


def iter_events(
    source: SourceInput,
    config: Optional[SourceConfig] = None,
    correlation_id: Optional[str] = None
) -> Iterator[Event]:
    """Iterate structural events of one XML document.

    Args:
        source: XML content, Path, or file-like object
        config: Optional source configuration
        correlation_id: Optional correlation ID for request tracking

    Returns:
        Iterator of events in document order
    """
    return iter(XMLEventSource(source, config, correlation_id))
