"""Structural event model consumed by the thinning tree builder.

Events are small immutable records. The builder dispatches on
:attr:`type`, so anything producing these three shapes in document order can
drive a build: the bundled XML event sources, a hand-written list in a test,
or an adapter over another parser.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, Optional, Union


class EventType(Enum):
    """Kinds of structural events."""

    START = auto()   # Element opened
    TEXT = auto()    # Character content inside the current element
    END = auto()     # Current element closed


@dataclass(frozen=True)
class StartEvent:
    """Element start with its tag name and attributes."""

    name: str
    attributes: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate event values."""
        if not self.name:
            raise ValueError("Start event name cannot be empty")

    @property
    def type(self) -> EventType:
        return EventType.START


@dataclass(frozen=True)
class TextEvent:
    """Character content belonging to the innermost open element."""

    content: str

    @property
    def type(self) -> EventType:
        return EventType.TEXT


@dataclass(frozen=True)
class EndEvent:
    """Element end.

    The name is informational only; the builder closes whatever is on top of
    its stack and leaves tag matching to the event source.
    """

    name: Optional[str] = None

    @property
    def type(self) -> EventType:
        return EventType.END


Event = Union[StartEvent, TextEvent, EndEvent]


def start(name: str, **attributes: str) -> StartEvent:
    """Build a :class:`StartEvent`; keyword arguments become attributes."""
    return StartEvent(name, dict(attributes))


def text(content: str) -> TextEvent:
    """Build a :class:`TextEvent`."""
    return TextEvent(content)


def end(name: Optional[str] = None) -> EndEvent:
    """Build an :class:`EndEvent`."""
    return EndEvent(name)
