"""Unit tests for the arena-backed entry tree."""

from __future__ import annotations

import pytest

from core.errors import StorageKeyError
from tree.entry_tree import ROOT_INDEX, EntryTree, split_dotted_key


def _sample_tree() -> EntryTree:
    tree = EntryTree()
    server = tree.add_child(ROOT_INDEX, "server")
    tree.add_child(server, "host", "localhost")
    tree.add_child(server, "port", "8080")
    tree.add_child(ROOT_INDEX, "name", "demo")
    return tree


def test_new_tree_is_empty() -> None:
    """A fresh tree holds only the root sentinel."""
    tree = EntryTree()

    assert len(tree) == 0 and tree.node(tree.root).local_key is None


def test_add_child_links_parent_and_child() -> None:
    """New entries should be appended to their parent's children."""
    tree = EntryTree()
    index = tree.add_child(ROOT_INDEX, "a", "1")

    assert tree.children_of(ROOT_INDEX) == (index,) and tree.parent_of(index) == ROOT_INDEX


def test_depth_of_counts_ancestors() -> None:
    """Top-level entries are depth 0 and the root is depth -1."""
    tree = _sample_tree()
    host = tree.resolve("server.host")

    assert (tree.depth_of(ROOT_INDEX), tree.depth_of(host)) == (-1, 1)


def test_global_key_joins_local_keys() -> None:
    """Global keys should join ancestors with dots."""
    tree = _sample_tree()

    assert tree.global_key(tree.resolve("server.port")) == "server.port"


def test_walk_yields_pre_order_with_depths() -> None:
    """Walking should visit parents before children in insertion order."""
    tree = _sample_tree()

    visited = [(depth, tree.node(index).local_key) for depth, index in tree.walk()]

    assert visited == [(0, "server"), (1, "host"), (1, "port"), (0, "name")]


def test_resolve_returns_none_for_missing_key() -> None:
    """Lookups without create must not change the tree."""
    tree = _sample_tree()

    assert tree.resolve("server.missing") is None and len(tree) == 4


@pytest.mark.parametrize("dotted_key", ["", "server.", ".server", "server..host", '"server"'])
def test_resolve_malformed_key_without_create_finds_nothing(dotted_key: str) -> None:
    """Lookups of malformed keys return None instead of raising."""
    tree = _sample_tree()

    assert tree.resolve(dotted_key) is None


def test_resolve_malformed_key_with_create_raises() -> None:
    """Creating entries still validates every segment."""
    tree = _sample_tree()

    with pytest.raises(StorageKeyError):
        tree.resolve("server.", create=True)

    assert len(tree) == 4


def test_resolve_with_create_appends_missing_entries() -> None:
    """Missing intermediate entries are created without values."""
    tree = _sample_tree()

    index = tree.resolve("db.primary.url", create=True)

    assert tree.global_key(index) == "db.primary.url" and tree.resolve("db.primary") is not None


def test_resolve_with_create_reuses_existing_entries() -> None:
    """Existing prefixes are followed rather than duplicated."""
    tree = _sample_tree()

    tree.resolve("server.timeout", create=True)

    assert len(tree.children_of(ROOT_INDEX)) == 2 and len(tree) == 5


def test_find_child_matches_exact_local_key() -> None:
    """Sibling lookup is exact and case sensitive."""
    tree = _sample_tree()

    assert tree.find_child(ROOT_INDEX, "Server") is None


def test_split_dotted_key_rejects_empty_segment() -> None:
    """Doubled separators should be rejected."""
    with pytest.raises(StorageKeyError) as error_info:
        split_dotted_key("a..b")

    assert "must not be empty" in str(error_info.value)


def test_split_dotted_key_rejects_empty_key() -> None:
    """An empty dotted key addresses nothing."""
    with pytest.raises(StorageKeyError):
        split_dotted_key("")

    assert split_dotted_key("a") == ["a"]


def test_split_dotted_key_rejects_quotes() -> None:
    """Quotes cannot be written back in the text format."""
    with pytest.raises(StorageKeyError) as error_info:
        split_dotted_key('a."b"')

    assert "quotes" in str(error_info.value)
