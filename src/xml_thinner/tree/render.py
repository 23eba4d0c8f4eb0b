"""Text renderings of thinned trees.

The skeleton rendering prints the merged structure as indented markup: leaf
nodes as self-closing tags, inner nodes as open/close pairs around their
children. The synthetic root is not printed, so a single-document tree
renders as the shape of that document.
"""

import json
from typing import List, Tuple, Union
from xml.sax.saxutils import escape, quoteattr

from xml_thinner.shared import ChildOrder

from .node import ThinNode, ThinTree


def _open_tag(node: ThinNode, show_attributes: bool) -> str:
    if not (show_attributes and node.attributes):
        return node.name
    rendered = " ".join(
        f"{key}={quoteattr(value)}" for key, value in node.attributes.items()
    )
    return f"{node.name} {rendered}"


def _render_lines(
    node: ThinNode,
    lines: List[str],
    indent: str,
    order: ChildOrder,
    show_attributes: bool,
    show_text: bool
) -> None:
    # Explicit stack of (node, level, closing) frames
    pending: List[Tuple[ThinNode, int, bool]] = [
        (child, 0, False) for child in reversed(list(node.iter_children(order)))
    ]
    while pending:
        current, level, closing = pending.pop()
        prefix = indent * level

        if closing:
            lines.append(f"{prefix}</{current.name}>")
            continue

        tag = _open_tag(current, show_attributes)
        text = escape(current.text) if show_text and current.text else None

        if current.is_leaf:
            if text is None:
                lines.append(f"{prefix}<{tag} />")
            else:
                lines.append(f"{prefix}<{tag}>{text}</{current.name}>")
            continue

        lines.append(f"{prefix}<{tag}>")
        if text is not None:
            lines.append(f"{prefix}{indent}{text}")
        pending.append((current, level, True))
        pending.extend(
            (child, level + 1, False)
            for child in reversed(list(current.iter_children(order)))
        )


def render_skeleton(
    target: Union[ThinTree, ThinNode],
    indent: str = "  ",
    order: ChildOrder = ChildOrder.FIRST_SEEN,
    show_attributes: bool = False,
    show_text: bool = False
) -> str:
    """Render a tree (or the subtree below a node) as indented markup.

    Args:
        target: Tree or node whose children are rendered
        indent: Indentation unit per nesting level
        order: Child ordering policy
        show_attributes: Include merged attributes in opening tags
        show_text: Include merged text content

    Returns:
        Rendered skeleton, one tag per line, with a trailing newline when
        anything was rendered

    Examples:
        >>> from xml_thinner.tree import ThinNode, ThinTree
        >>> root = ThinNode("#root", children={"a": ThinNode("a", children={"b": ThinNode("b")})})
        >>> print(render_skeleton(ThinTree(root)), end="")
        <a>
          <b />
        </a>
    """
    node = target.root if isinstance(target, ThinTree) else target
    lines: List[str] = []
    _render_lines(node, lines, indent, order, show_attributes, show_text)
    return "".join(f"{line}\n" for line in lines)


def render_json(
    tree: ThinTree,
    order: ChildOrder = ChildOrder.FIRST_SEEN,
    indent: int = 2
) -> str:
    """Render a tree as JSON using :meth:`ThinTree.to_dict`.

    Raises:
        ValueError: The tree is nested deeper than the json encoder supports
    """
    try:
        return json.dumps(tree.to_dict(order), indent=indent, ensure_ascii=False)
    except RecursionError as e:
        raise ValueError(
            f"Tree nesting depth {tree.max_depth} is too deep for JSON output"
        ) from e
