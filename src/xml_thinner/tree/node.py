"""Node and tree structures of a thinned document.

A :class:`ThinNode` stands for one tag name at one path. All occurrences of
that tag among the direct children of the same parent share the node, so the
children mapping is keyed by name and never holds two entries with the same
tag.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from xml_thinner.shared import AttributeMergePolicy, ChildOrder, TextMergePolicy

PATH_SEPARATOR = "/"


@dataclass(eq=False)
class ThinNode:
    """One merged tag identity in the thinned tree.

    Nodes are compared by identity. Use :meth:`same_shape` to compare the
    structure of two trees.
    """

    name: str
    attributes: Dict[str, str] = field(default_factory=dict)
    text: Optional[str] = None
    children: Dict[str, "ThinNode"] = field(default_factory=dict)
    parent: Optional["ThinNode"] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        """Validate node values and adopt pre-built children."""
        if not self.name:
            raise ValueError("Node name cannot be empty")

        for key, child in self.children.items():
            if key != child.name:
                raise ValueError(
                    f"Child stored under '{key}' is named '{child.name}'"
                )
            child.parent = self

    def __repr__(self) -> str:
        return f"ThinNode(name={self.name!r}, children={list(self.children)!r})"

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @property
    def depth(self) -> int:
        """Distance from the root (root = 0)."""
        depth = 0
        node = self.parent
        while node is not None:
            depth += 1
            node = node.parent
        return depth

    @property
    def path(self) -> str:
        """Slash-separated path from the root; the root itself is ``/``."""
        names: List[str] = []
        node: Optional[ThinNode] = self
        while node is not None and node.parent is not None:
            names.append(node.name)
            node = node.parent
        return PATH_SEPARATOR + PATH_SEPARATOR.join(reversed(names))

    def get_child(self, name: str) -> Optional["ThinNode"]:
        """Return the child representing ``name``, if any."""
        return self.children.get(name)

    def add_child(self, child: "ThinNode") -> "ThinNode":
        """Attach a new child; its name must not be taken yet."""
        if not isinstance(child, ThinNode):
            raise TypeError("Child must be a ThinNode instance")
        if child.name in self.children:
            raise ValueError(
                f"Node '{self.path}' already has a child named '{child.name}'"
            )
        child.parent = self
        self.children[child.name] = child
        return child

    def child_or_create(self, name: str) -> Tuple["ThinNode", bool]:
        """Find the child named ``name`` or create it.

        Returns:
            Tuple of the child node and whether it was newly created
        """
        existing = self.children.get(name)
        if existing is not None:
            return existing, False
        return self.add_child(ThinNode(name)), True

    def merge_attributes(
        self,
        attributes: Mapping[str, str],
        policy: AttributeMergePolicy = AttributeMergePolicy.UNION_LAST_WINS
    ) -> None:
        """Fold the attributes of one occurrence into this node."""
        if not attributes or policy is AttributeMergePolicy.DISCARD:
            return
        if policy is AttributeMergePolicy.UNION_LAST_WINS:
            self.attributes.update(attributes)
        else:
            for key, value in attributes.items():
                self.attributes.setdefault(key, value)

    def merge_text(
        self,
        content: str,
        policy: TextMergePolicy = TextMergePolicy.DISCARD,
        separator: str = " "
    ) -> None:
        """Fold one piece of text content into this node."""
        if not content or policy is TextMergePolicy.DISCARD:
            return
        if policy is TextMergePolicy.FIRST:
            if self.text is None:
                self.text = content
        elif policy is TextMergePolicy.LAST:
            self.text = content
        elif self.text is None:
            self.text = content
        else:
            self.text = f"{self.text}{separator}{content}"

    def iter_children(
        self, order: ChildOrder = ChildOrder.FIRST_SEEN
    ) -> Iterator["ThinNode"]:
        """Iterate direct children in the requested order."""
        if order is ChildOrder.ALPHABETICAL:
            return iter([self.children[name] for name in sorted(self.children)])
        return iter(list(self.children.values()))

    def iter_nodes(
        self, order: ChildOrder = ChildOrder.FIRST_SEEN
    ) -> Iterator["ThinNode"]:
        """Iterate this node and all descendants in pre-order."""
        pending = [self]
        while pending:
            node = pending.pop()
            yield node
            pending.extend(reversed(list(node.iter_children(order))))

    def find(self, path: str) -> Optional["ThinNode"]:
        """Find a descendant by slash-separated path relative to this node.

        A leading slash is ignored, so ``tree.root.find("/a/b")`` and
        ``tree.root.find("a/b")`` are equivalent.
        """
        node: Optional[ThinNode] = self
        for name in path.strip(PATH_SEPARATOR).split(PATH_SEPARATOR):
            if not name:
                continue
            if node is None:
                return None
            node = node.children.get(name)
        return node

    def same_shape(self, other: "ThinNode") -> bool:
        """Check that both subtrees have the same names at the same places."""
        pending = [(self, other)]
        while pending:
            left, right = pending.pop()
            if left.name != right.name or left.children.keys() != right.children.keys():
                return False
            pending.extend(
                (child, right.children[name]) for name, child in left.children.items()
            )
        return True

    def to_dict(self, order: ChildOrder = ChildOrder.FIRST_SEEN) -> Dict[str, Any]:
        """Convert node and descendants to a dictionary."""
        result = self._fields_dict()
        pending = [(self, result)]
        while pending:
            node, data = pending.pop()
            if not node.children:
                continue
            children = list(node.iter_children(order))
            data["children"] = [child._fields_dict() for child in children]
            pending.extend(zip(children, data["children"]))
        return result

    def _fields_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"name": self.name}
        if self.attributes:
            result["attributes"] = dict(self.attributes)
        if self.text is not None:
            result["text"] = self.text
        return result


@dataclass
class ThinTree:
    """Thinned document: the synthetic root and everything reachable from it."""

    root: ThinNode

    @property
    def node_count(self) -> int:
        """Number of nodes below the root."""
        return sum(1 for _ in self.root.iter_nodes()) - 1

    @property
    def max_depth(self) -> int:
        """Deepest nesting level (root = 0)."""
        deepest = 0
        pending = [(self.root, 0)]
        while pending:
            node, depth = pending.pop()
            deepest = max(deepest, depth)
            pending.extend((child, depth + 1) for child in node.children.values())
        return deepest

    def iter_nodes(
        self,
        order: ChildOrder = ChildOrder.FIRST_SEEN,
        include_root: bool = False
    ) -> Iterator[ThinNode]:
        """Iterate nodes in pre-order."""
        nodes = self.root.iter_nodes(order)
        if not include_root:
            next(nodes)
        return nodes

    def paths(self, order: ChildOrder = ChildOrder.FIRST_SEEN) -> List[str]:
        """All node paths in pre-order, root excluded."""
        return [node.path for node in self.iter_nodes(order)]

    def find(self, path: str) -> Optional[ThinNode]:
        """Find a node by path from the root, e.g. ``/catalog/book``."""
        return self.root.find(path)

    def same_shape(self, other: "ThinTree") -> bool:
        return self.root.same_shape(other.root)

    def to_dict(self, order: ChildOrder = ChildOrder.FIRST_SEEN) -> Dict[str, Any]:
        """Convert tree to dictionary representation with summary counts."""
        return {
            "node_count": self.node_count,
            "max_depth": self.max_depth,
            "root": self.root.to_dict(order),
        }

    def render(self, **options: Any) -> str:
        """Render an indented markup skeleton; see :func:`render_skeleton`."""
        from .render import render_skeleton

        return render_skeleton(self, **options)

    def __str__(self) -> str:
        return self.render()
