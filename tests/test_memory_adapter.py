"""Tests for the in-memory adapter, its tokens and frame/stack helpers."""

import sys
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from sharewalk import InvalidCursorError, PathNotFoundError, TraversalFrame, TraversalStack
from sharewalk.adapters import MemoryNode, MemoryTreeAdapter
from sharewalk.testing import folder, leaf, tree


@pytest.fixture
def adapter():
    return tree(
        folder("docs", leaf("one"), leaf("two")),
        leaf("readme"),
        folder("empty"),
    )


def test_listings_split_leaves_and_containers(adapter):
    root = adapter.get_root()

    page = adapter.next_leaf_item(adapter.open_leaf_cursor(root))
    assert page[0].name() == "readme"
    assert adapter.next_leaf_item(page[1]) is None

    first = adapter.next_child_container(adapter.open_child_cursor(root))
    second = adapter.next_child_container(first[1])
    assert [first[0].name(), second[0].name()] == ["docs", "empty"]
    assert adapter.next_child_container(second[1]) is None


def test_tokens_are_stable_and_resumable_by_a_new_adapter(adapter):
    docs = adapter.resolve_path(["docs"])
    token = adapter.next_leaf_item(adapter.open_leaf_cursor(docs))[1]

    rebuilt = tree(
        folder("docs", leaf("one"), leaf("two")),
        leaf("readme"),
        folder("empty"),
    )
    assert rebuilt.next_leaf_item(token)[0].name() == "two"
    assert rebuilt.open_leaf_cursor(rebuilt.resolve_path(["docs"])) == adapter.open_leaf_cursor(docs)


def test_tokens_are_counted(adapter):
    root = adapter.get_root()
    adapter.next_leaf_item(adapter.open_leaf_cursor(root))
    adapter.next_child_container(adapter.open_child_cursor(root))
    assert adapter.calls == 2


@pytest.mark.parametrize("token", ["", "!!!", "bm90LWpzb24=", "W10="])
def test_garbage_tokens_are_rejected(adapter, token):
    with pytest.raises(InvalidCursorError):
        adapter.next_leaf_item(token)


def test_wrong_kind_token_is_rejected(adapter):
    child_token = adapter.open_child_cursor(adapter.get_root())
    with pytest.raises(InvalidCursorError):
        adapter.next_leaf_item(child_token)


def test_leaf_cannot_hold_children():
    with pytest.raises(ValueError):
        leaf("file").add(leaf("other"))


def test_root_must_be_container():
    with pytest.raises(ValueError):
        MemoryTreeAdapter(MemoryNode("file"), acting_identity="me")


def test_identifiers_follow_insertion_order(adapter):
    docs = adapter.resolve_path(["docs"])
    assert docs.identifier() == "/0"
    assert docs.children[0].identifier() == "/0/0"
    assert adapter.get_root().identifier() == "/"
    assert adapter.find("/0") is docs
    assert adapter.find("/2").name() == "empty"


def test_same_named_siblings_get_distinct_identifiers():
    adapter = tree(folder("same", leaf("f")), folder("same", leaf("g")))
    first, second = adapter.get_root().containers
    assert first.identifier() != second.identifier()
    assert adapter.find(first.identifier()) is first
    assert adapter.find(second.identifier()) is second

    token = adapter.open_leaf_cursor(first)
    assert adapter.next_leaf_item(token)[0].name() == "f"


def test_removed_container_tokens_are_rejected(adapter):
    docs = adapter.resolve_path(["docs"])
    token = adapter.open_leaf_cursor(docs)
    adapter.get_root().remove("docs")
    with pytest.raises(InvalidCursorError):
        adapter.next_leaf_item(token)

    # Ordinals are not reused by later additions
    adapter.get_root().add(folder("docs", leaf("new")))
    with pytest.raises(InvalidCursorError):
        adapter.next_leaf_item(token)


def test_resolve_path(adapter):
    assert adapter.resolve_path([]) is adapter.get_root()
    assert adapter.resolve_path(["docs"]).name() == "docs"
    with pytest.raises(PathNotFoundError) as excinfo:
        adapter.resolve_path(["readme"])
    assert "readme" in str(excinfo.value)
    with pytest.raises(PathNotFoundError):
        adapter.resolve_path(["docs", ".."])


def test_stack_paths_skip_empty_root_name():
    stack = TraversalStack([
        TraversalFrame("", None, "t0"),
        TraversalFrame("a", None, "t1"),
        TraversalFrame("b", "t2", "t3"),
    ])
    assert stack.path() == "a/b"
    assert stack.path(0) == ""
    assert stack.path(1) == "a"
    assert stack.child_path("f.txt") == "a/b/f.txt"
    assert TraversalStack([TraversalFrame("", None, "t")]).child_path("f.txt") == "f.txt"


def test_stack_push_pop_and_truthiness():
    stack = TraversalStack()
    assert not stack
    frame = TraversalFrame("x", "l", "c")
    stack.push(frame)
    assert stack and stack.top is frame and len(stack) == 1
    assert stack.pop() is frame
    assert not stack


def test_frame_from_container_opens_both_cursors(adapter):
    frame = TraversalFrame.from_container(adapter, adapter.resolve_path(["docs"]))
    assert frame.name == "docs"
    assert frame.leaf_cursor is not None
    assert frame.child_cursor is not None
    assert not frame.leaves_exhausted
    assert TraversalFrame.from_dict(frame.to_dict()) == frame
