"""Unit tests for the in-memory config document."""

from __future__ import annotations

import pytest

from capital.config.document import MISSING, ConfigDocument
from capital.constants import FRESH_DOCUMENT_HEADER


def test_absent_paths_are_missing_not_errors() -> None:
    document = ConfigDocument({"a": {"b": 1}, "s": "scalar"})

    assert document.get(("a", "b")) == 1
    assert document.get(("a", "c")) is MISSING
    assert document.get(("s", "deeper")) is MISSING
    assert document.get(("nope",)) is MISSING
    assert not MISSING


def test_set_creates_intermediate_maps() -> None:
    document = ConfigDocument()
    document.set(("a", "b", "c"), 3)

    assert document.snapshot() == {"a": {"b": {"c": 3}}}


def test_set_rejects_the_root() -> None:
    with pytest.raises(ValueError, match="root"):
        ConfigDocument().set((), {})


def test_set_doc_writes_hash_prefixed_sibling() -> None:
    document = ConfigDocument()
    document.set(("a", "b"), 1)
    document.set_doc(("a", "b"), "explains b")
    document.set_doc(("a", "c"), "")

    assert document.snapshot() == {"a": {"b": 1, "#b": "explains b"}}


def test_delete_removes_key_and_its_doc() -> None:
    document = ConfigDocument({"a": {"b": 1, "#b": "doc", "": 2, "#": "header"}})

    document.delete(("a", "b"))
    document.delete(("a", ""))
    document.delete(("missing", "x"))

    assert document.snapshot() == {"a": {"#": "header"}}
    with pytest.raises(ValueError, match="root"):
        document.delete(())


def test_fresh_document_is_fail_safe_with_header() -> None:
    document = ConfigDocument.fresh()

    assert document.fail_safe
    assert not document.repaired
    assert document.snapshot() == {"#": FRESH_DOCUMENT_HEADER}


def test_loaded_document_is_not_fail_safe() -> None:
    assert not ConfigDocument({"a": 1}).fail_safe


def test_repairs_are_recorded_in_order() -> None:
    document = ConfigDocument()
    document.record_repair(("a", "b"), "first")
    document.record_repair((), "second")

    assert document.repaired
    assert [(repair.key, repair.message) for repair in document.repairs] == [
        ("a.b", "first"),
        ("<root>", "second"),
    ]


def test_snapshot_is_a_deep_copy() -> None:
    source = {"a": {"items": [1, 2]}}
    document = ConfigDocument(source)
    snapshot = document.snapshot()
    snapshot["a"]["items"].append(3)
    source["a"]["items"].append(4)

    assert document.get(("a", "items")) == [1, 2]


def test_non_string_keys_are_normalized_at_every_level() -> None:
    document = ConfigDocument({1: {2: "x"}, False: "y"})

    assert document.get(("1", "2")) == "x"
    assert document.get(("False",)) == "y"
