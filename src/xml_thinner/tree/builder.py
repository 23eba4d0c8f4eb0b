"""Thinning tree builder.

The builder consumes structural events in one forward pass and merges every
element into the node that represents its tag name under its parent. A
traversal stack mirrors the open element path: the bottom entry is the
synthetic root, the top entry is the node that receives the next child or
text. The same node objects are reachable from the stack and from their
parent's children mapping, so children attached through one path are visible
through the other.
"""

import time
from typing import Dict, Iterable, List, Optional, Tuple

from xml_thinner.events import Event, EventType, SourceError
from xml_thinner.shared import PerformanceMetrics, TreeConfig, get_logger

from .errors import (
    DepthLimitExceededError,
    InvalidEventError,
    MalformedInputError,
    StructuralUnderflowError,
    ThinningError,
    UnterminatedDocumentError,
)
from .node import PATH_SEPARATOR, ThinNode, ThinTree

MS_PER_SECOND = 1000


class ThinningTreeBuilder:
    """Build a thinned tree from a stream of structural events.

    One builder runs one build at a time; each build starts from a fresh
    traversal stack holding only the root.

    Examples:
        >>> from xml_thinner.events import start, end
        >>> builder = ThinningTreeBuilder()
        >>> tree = builder.build([start("a"), start("b"), end(), start("b"), end(), end()])
        >>> list(tree.find("a").children)
        ['b']
    """

    def __init__(
        self,
        config: Optional[TreeConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize tree builder.

        Args:
            config: Tree configuration (merge policies, root name, depth limit)
            correlation_id: Optional correlation ID for request tracking
        """
        self.config = config or TreeConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "thinning_tree_builder")

        self._tree: Optional[ThinTree] = None
        self._stack: List[ThinNode] = []
        self._start_time = 0.0

        # Undo journal, kept only while merging into a caller's tree
        self._merging = False
        self._created: List[ThinNode] = []
        self._snapshots: Dict[int, Tuple[ThinNode, Dict[str, str], Optional[str]]] = {}
        self.metrics = PerformanceMetrics()

    @property
    def depth(self) -> int:
        """Current traversal stack length (root frame included)."""
        return len(self._stack)

    @property
    def is_building(self) -> bool:
        return self._tree is not None

    @property
    def current_path(self) -> str:
        """Path of the open element on top of the stack."""
        return PATH_SEPARATOR + PATH_SEPARATOR.join(
            node.name for node in self._stack[1:]
        )

    @property
    def current_node(self) -> Optional[ThinNode]:
        return self._stack[-1] if self._stack else None

    def build(
        self,
        events: Iterable[Event],
        tree: Optional[ThinTree] = None
    ) -> ThinTree:
        """Consume ``events`` and return the thinned tree.

        Args:
            events: Structural events in document order
            tree: Existing tree to merge into; a new one is created when omitted.
                A failed build leaves it exactly as it was passed in.

        Returns:
            The thinned tree

        Raises:
            StructuralUnderflowError: An end event had no open element
            UnterminatedDocumentError: Events ran out with elements still open
            MalformedInputError: The event source failed
            DepthLimitExceededError: Nesting exceeded ``config.max_depth``
        """
        self.begin(tree)
        try:
            for event in events:
                self.feed(event)
        except SourceError as e:
            error = MalformedInputError(
                str(e),
                depth=self.depth,
                path=self.current_path,
                line=e.line,
                column=e.column,
            )
            self._abort(error)
            raise error from e
        except ThinningError:
            # feed() has already aborted the build
            raise
        except Exception:
            self._rollback()
            self._reset()
            raise
        return self.close()

    def begin(self, tree: Optional[ThinTree] = None) -> ThinTree:
        """Start an incremental build; pair with :meth:`feed` and :meth:`close`."""
        if self._tree is not None:
            raise RuntimeError("A build is already in progress")

        if tree is None:
            tree = ThinTree(ThinNode(self.config.root_name))
            merging = False
        else:
            merging = True
        self._tree = tree
        self._stack = [self._tree.root]
        self._merging = merging
        self.metrics = PerformanceMetrics()
        self._start_time = time.time()

        self.logger.info(
            "Starting thinning build",
            extra={
                "root_name": tree.root.name,
                "merging_into_existing": merging,
            }
        )
        return tree

    def feed(self, event: Event) -> None:
        """Apply a single event to the tree under construction."""
        if self._tree is None:
            raise RuntimeError("No build in progress; call begin() first")

        event_type = getattr(event, "type", None)
        try:
            if event_type is EventType.START:
                self._on_start(event.name, event.attributes)
            elif event_type is EventType.TEXT:
                self._on_text(event.content)
            elif event_type is EventType.END:
                self._on_end()
            else:
                raise InvalidEventError(
                    f"Unsupported event: {event!r}",
                    depth=self.depth,
                    path=self.current_path,
                )
        except ThinningError as e:
            self._abort(e)
            raise

        self.metrics.events_processed += 1

    def close(self) -> ThinTree:
        """Finish the build and return the tree."""
        if self._tree is None:
            raise RuntimeError("No build in progress; call begin() first")

        if len(self._stack) != 1:
            error = UnterminatedDocumentError(
                f"Event stream ended with {len(self._stack) - 1} unclosed "
                f"element(s) at {self.current_path}",
                depth=self.depth,
                path=self.current_path,
            )
            self._abort(error)
            raise error

        tree = self._tree
        self.metrics.processing_time_ms = (
            (time.time() - self._start_time) * MS_PER_SECOND
        )
        self._reset()

        self.logger.info(
            "Thinning build completed",
            extra={
                "events_processed": self.metrics.events_processed,
                "nodes_created": self.metrics.nodes_created,
                "nodes_revisited": self.metrics.nodes_revisited,
                "max_depth": self.metrics.max_depth,
                "processing_time_ms": self.metrics.processing_time_ms,
            }
        )
        return tree

    def _on_start(self, name: str, attributes: dict) -> None:
        max_depth = self.config.max_depth
        if max_depth is not None and len(self._stack) > max_depth:
            raise DepthLimitExceededError(
                f"Element '{name}' exceeds the maximum depth of {max_depth}",
                depth=self.depth,
                path=self.current_path,
            )

        current = self._stack[-1]
        child, created = current.child_or_create(name)
        if self._merging:
            if created:
                self._created.append(child)
            else:
                self._snapshot(child)
        self._stack.append(child)
        child.merge_attributes(attributes, self.config.attribute_policy)

        self.metrics.start_events += 1
        if created:
            self.metrics.nodes_created += 1
        else:
            self.metrics.nodes_revisited += 1
        nesting = len(self._stack) - 1
        if nesting > self.metrics.max_depth:
            self.metrics.max_depth = nesting

        self.logger.debug(
            "Entering node",
            extra={"node": name, "depth": self.depth, "created": created}
        )

    def _on_text(self, content: str) -> None:
        self.metrics.text_events += 1
        if self.config.ignore_whitespace_text:
            content = content.strip()
            if not content:
                return
        if self._merging:
            self._snapshot(self._stack[-1])
        self._stack[-1].merge_text(
            content, self.config.text_policy, self.config.text_separator
        )

    def _on_end(self) -> None:
        if len(self._stack) <= 1:
            raise StructuralUnderflowError(
                "End event without a matching start event",
                depth=self.depth,
                path=self.current_path,
            )
        node = self._stack.pop()
        self.metrics.end_events += 1

        self.logger.debug(
            "Exiting node",
            extra={"node": node.name, "depth": self.depth}
        )

    def _abort(self, error: ThinningError) -> None:
        self.metrics.processing_time_ms = (
            (time.time() - self._start_time) * MS_PER_SECOND
        )
        self.logger.error(
            "Thinning build aborted",
            extra={**error.to_details(), "events_processed": self.metrics.events_processed}
        )
        self._rollback()
        self._reset()

    def _snapshot(self, node: ThinNode) -> None:
        key = id(node)
        if key not in self._snapshots:
            self._snapshots[key] = (node, dict(node.attributes), node.text)

    def _rollback(self) -> None:
        """Restore a caller-supplied tree to its state before this build."""
        if not self._merging:
            return
        for node in reversed(self._created):
            if node.parent is not None:
                node.parent.children.pop(node.name, None)
                node.parent = None
        for node, attributes, text in self._snapshots.values():
            node.attributes = attributes
            node.text = text
        if self._created or self._snapshots:
            self.logger.debug(
                "Rolled back partial merge",
                extra={
                    "nodes_removed": len(self._created),
                    "nodes_restored": len(self._snapshots),
                }
            )

    def _reset(self) -> None:
        self._tree = None
        self._stack = []
        self._merging = False
        self._created = []
        self._snapshots = {}
