"""Structural events and the sources that produce them.

Key Components:
    StartEvent, TextEvent, EndEvent: Event records consumed by the builder
    XMLEventSource: Single-use event iterator over one XML document
    SourceError: Raised when the input cannot be turned into events
"""

from .events import (
    EndEvent,
    Event,
    EventType,
    StartEvent,
    TextEvent,
    end,
    start,
    text,
)
from .source import (
    BackendUnavailableError,
    SourceError,
    SourceInput,
    XMLEventSource,
    is_backend_available,
    iter_events,
)

__all__ = [
    "EndEvent",
    "Event",
    "EventType",
    "StartEvent",
    "TextEvent",
    "end",
    "start",
    "text",
    "BackendUnavailableError",
    "SourceError",
    "SourceInput",
    "XMLEventSource",
    "is_backend_available",
    "iter_events",
]
