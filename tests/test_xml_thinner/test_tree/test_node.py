"""Tests for thinned tree nodes and the tree container."""

import pytest

from xml_thinner.shared import AttributeMergePolicy, ChildOrder, TextMergePolicy
from xml_thinner.tree import ThinNode, ThinTree


@pytest.fixture
def sample_tree() -> ThinTree:
    """root -> catalog -> (book -> (title, author), magazine)."""
    root = ThinNode("#root")
    catalog = root.add_child(ThinNode("catalog"))
    book = catalog.add_child(ThinNode("book", attributes={"id": "b1"}))
    book.add_child(ThinNode("title"))
    book.add_child(ThinNode("author"))
    catalog.add_child(ThinNode("magazine"))
    return ThinTree(root)


class TestThinNode:
    """Test ThinNode construction and mutation."""

    def test_node_creation(self) -> None:
        node = ThinNode("item", attributes={"id": "1"}, text="value")

        assert node.name == "item"
        assert node.attributes == {"id": "1"}
        assert node.text == "value"
        assert node.is_root
        assert node.is_leaf
        assert node.path == "/"

    def test_empty_name_raises_error(self) -> None:
        with pytest.raises(ValueError, match="Node name cannot be empty"):
            ThinNode("")

    def test_prebuilt_children_adopt_parent(self) -> None:
        child = ThinNode("child")
        parent = ThinNode("parent", children={"child": child})

        assert child.parent is parent

    def test_prebuilt_children_key_must_match_name(self) -> None:
        with pytest.raises(ValueError, match="is named"):
            ThinNode("parent", children={"other": ThinNode("child")})

    def test_add_child_rejects_duplicate_name(self) -> None:
        parent = ThinNode("parent")
        parent.add_child(ThinNode("child"))

        with pytest.raises(ValueError, match="already has a child named 'child'"):
            parent.add_child(ThinNode("child"))

    def test_add_child_with_invalid_type_raises_error(self) -> None:
        with pytest.raises(TypeError, match="Child must be a ThinNode instance"):
            ThinNode("parent").add_child("child")  # type: ignore[arg-type]

    def test_child_or_create(self) -> None:
        parent = ThinNode("parent")

        first, created_first = parent.child_or_create("child")
        second, created_second = parent.child_or_create("child")

        assert created_first is True
        assert created_second is False
        assert first is second
        assert list(parent.children) == ["child"]

    def test_nodes_compare_by_identity(self) -> None:
        assert ThinNode("a") != ThinNode("a")

    def test_merge_attributes_policies(self) -> None:
        node = ThinNode("a", attributes={"id": "1"})

        node.merge_attributes({"id": "2", "x": "y"}, AttributeMergePolicy.UNION_FIRST_WINS)
        assert node.attributes == {"id": "1", "x": "y"}

        node.merge_attributes({"id": "3"}, AttributeMergePolicy.UNION_LAST_WINS)
        assert node.attributes == {"id": "3", "x": "y"}

        node.merge_attributes({"z": "1"}, AttributeMergePolicy.DISCARD)
        assert "z" not in node.attributes

    def test_merge_text_policies(self) -> None:
        node = ThinNode("a")

        node.merge_text("one", TextMergePolicy.DISCARD)
        assert node.text is None

        node.merge_text("one", TextMergePolicy.CONCATENATE, ", ")
        node.merge_text("two", TextMergePolicy.CONCATENATE, ", ")
        assert node.text == "one, two"

        node.merge_text("three", TextMergePolicy.FIRST)
        assert node.text == "one, two"

        node.merge_text("four", TextMergePolicy.LAST)
        assert node.text == "four"

    def test_repr_lists_child_names(self) -> None:
        node = ThinNode("a", children={"b": ThinNode("b")})
        assert repr(node) == "ThinNode(name='a', children=['b'])"


class TestNavigation:
    """Test paths, lookups and traversal."""

    def test_find_by_relative_and_absolute_path(self, sample_tree: ThinTree) -> None:
        assert sample_tree.find("catalog/book/title").name == "title"
        assert sample_tree.find("/catalog/book/title").name == "title"
        assert sample_tree.find("catalog/missing") is None
        assert sample_tree.find("catalog/missing/deeper") is None
        assert sample_tree.find("/") is sample_tree.root

    def test_path_and_depth(self, sample_tree: ThinTree) -> None:
        author = sample_tree.find("catalog/book/author")

        assert author.path == "/catalog/book/author"
        assert author.depth == 3

    def test_iter_nodes_pre_order(self, sample_tree: ThinTree) -> None:
        assert sample_tree.paths() == [
            "/catalog",
            "/catalog/book",
            "/catalog/book/title",
            "/catalog/book/author",
            "/catalog/magazine",
        ]

    def test_iter_nodes_alphabetical(self, sample_tree: ThinTree) -> None:
        assert sample_tree.paths(ChildOrder.ALPHABETICAL) == [
            "/catalog",
            "/catalog/book",
            "/catalog/book/author",
            "/catalog/book/title",
            "/catalog/magazine",
        ]

    def test_iter_nodes_with_root(self, sample_tree: ThinTree) -> None:
        nodes = list(sample_tree.iter_nodes(include_root=True))
        assert nodes[0] is sample_tree.root
        assert len(nodes) == 6

    def test_counts(self, sample_tree: ThinTree) -> None:
        assert sample_tree.node_count == 5
        assert sample_tree.max_depth == 3

    def test_same_shape(self, sample_tree: ThinTree) -> None:
        other = ThinNode("#root")
        catalog = other.add_child(ThinNode("catalog"))
        catalog.add_child(ThinNode("magazine"))
        book = catalog.add_child(ThinNode("book"))
        book.add_child(ThinNode("author"))
        book.add_child(ThinNode("title"))

        assert sample_tree.same_shape(ThinTree(other))

        book.add_child(ThinNode("isbn"))
        assert not sample_tree.same_shape(ThinTree(other))


class TestSerialization:
    """Test dictionary conversion."""

    def test_node_to_dict(self, sample_tree: ThinTree) -> None:
        book = sample_tree.find("catalog/book")

        assert book.to_dict() == {
            "name": "book",
            "attributes": {"id": "b1"},
            "children": [{"name": "title"}, {"name": "author"}],
        }

    def test_tree_to_dict_includes_summary(self, sample_tree: ThinTree) -> None:
        data = sample_tree.to_dict(ChildOrder.ALPHABETICAL)

        assert data["node_count"] == 5
        assert data["max_depth"] == 3
        assert data["root"]["name"] == "#root"
        book = data["root"]["children"][0]["children"][0]
        assert [child["name"] for child in book["children"]] == ["author", "title"]

    def test_text_included_when_present(self) -> None:
        assert ThinNode("a", text="x").to_dict() == {"name": "a", "text": "x"}
