"""Integration tests for the full text, binary, and tree pipeline."""

from __future__ import annotations

from pathlib import Path

import pytest

from kvtree import (
    DuplicateKeyError,
    IllegalDepthError,
    StorageFile,
    decode_records,
    encode_records,
    flatten_tree,
    load,
    load_tree,
    parse_text,
)

_NESTED_DOCUMENT = (
    "# database settings\n"
    '"db"\n'
    '\t"primary"\n'
    '\t\t"url"="postgres://db:5432/app"\n'
    "# seconds\n"
    '\t\t"timeout"="30"\n'
    '\t"replica"=""\n'
    '"app"\n'
    '\t"name"="kv = tree"\n'
)


def test_nested_values_and_grouping_entries() -> None:
    """Values nested under other values should all resolve."""
    store = StorageFile.from_text('"a"="1"\n\t"b"="2"\n"c"="3"')

    assert (store.get("a"), store.get("a.b"), store.get("c"), store.get("a.b.x")) == (
        "1",
        "2",
        "3",
        None,
    )


def test_grouping_entry_has_no_value() -> None:
    """A bare key is a grouping entry whose children still resolve."""
    store = StorageFile.from_text('"a"\n\t"b"="2"')

    assert store.get("a") is None and store.get("a.b") == "2"


def test_duplicate_top_level_key_fails_at_second_line() -> None:
    """Duplicate siblings are reported at the repeated record."""
    with pytest.raises(DuplicateKeyError) as error_info:
        StorageFile.from_text('"a"="1"\n"a"="2"')

    assert error_info.value.line == 2


def test_depth_jump_fails_at_jumping_line() -> None:
    """Jumping two levels is reported at the offending record."""
    with pytest.raises(IllegalDepthError) as error_info:
        StorageFile.from_text('"a"="1"\n\t\t"b"="2"')

    assert error_info.value.line == 2


def test_set_on_empty_store_creates_grouping_chain() -> None:
    """Only the addressed entry receives the value."""
    store = StorageFile()

    store.set("x.y.z", "v")

    assert (store.get("x"), store.get("x.y"), store.get("x.y.z")) == (None, None, "v")


def test_text_round_trip_preserves_tree() -> None:
    """Rendering and reloading a tree should give the same records."""
    store = StorageFile.from_text(_NESTED_DOCUMENT)

    reloaded = StorageFile.from_text(store.to_text())

    assert reloaded.to_records() == store.to_records()


def test_binary_round_trip_preserves_records() -> None:
    """Encoding and decoding flattened records should be lossless."""
    records = flatten_tree(load_tree(parse_text(_NESTED_DOCUMENT)))

    assert decode_records(encode_records(records)) == records


def test_binary_round_trip_with_alternate_encoding() -> None:
    """String fields should honor the requested codec."""
    records = parse_text('"naïve"="café"')

    assert decode_records(encode_records(records, "latin-1"), "latin-1") == records


@pytest.mark.parametrize(
    ("depths", "failing_line"),
    [
        ((0, 2), 2),
        ((0, 1, 3), 3),
        ((0, 1, 2, 0, 2), 5),
        ((1,), 1),
    ],
)
def test_any_depth_jump_fails_without_partial_tree(
    depths: tuple[int, ...],
    failing_line: int,
) -> None:
    """Jumps of two or more levels always fail the whole load."""
    text = "\n".join("\t" * depth + f'"k{index}"' for index, depth in enumerate(depths))

    with pytest.raises(IllegalDepthError) as error_info:
        StorageFile.from_text(text)

    assert (error_info.value.line, error_info.value.key) == (failing_line, f"k{failing_line - 1}")


@pytest.mark.parametrize(
    ("text", "failing_line", "global_key"),
    [
        ('"a"\n"a"', 2, "a"),
        ('"a"="1"\n"a"', 2, "a"),
        ('"p"\n\t"a"\n\t\t"x"\n\t"a"="2"', 4, "p.a"),
    ],
)
def test_duplicate_siblings_fail_with_or_without_values(
    text: str,
    failing_line: int,
    global_key: str,
) -> None:
    """Sibling duplicates fail regardless of their values."""
    with pytest.raises(DuplicateKeyError) as error_info:
        StorageFile.from_text(text)

    assert (error_info.value.line, error_info.value.key) == (failing_line, global_key)


def test_edit_and_reload_through_files(tmp_path: Path) -> None:
    """Edits saved as text and binary should reload identically."""
    text_path = tmp_path / "app.kvt"
    text_path.write_text(_NESTED_DOCUMENT, encoding="utf-8")
    store = load(text_path)
    store.set("db.primary.timeout", "60")
    store.set("app.debug", "false")
    store.save()
    binary_path = store.save_binary(tmp_path / "app.bin")

    from_text = load(text_path)
    from_binary = load(binary_path, storage_format="binary")

    assert from_text.to_text() == from_binary.to_text() and from_text.comments(
        "db.primary.timeout"
    ) == (" seconds",)
