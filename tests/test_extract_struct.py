"""Tests for building StructInfo from struct items."""

from typing import Any

import pytest

from quarry.crate_index import CrateIndex
from quarry.decode_rustdoc import decode_rustdoc
from quarry.errors import NotAStructError, StructuralError
from quarry.extract_struct import extract_struct
from quarry.models import StructKind


def decode(doc: dict[str, Any]) -> CrateIndex:
    """Decode with the default supported version range."""
    return decode_rustdoc(doc, min_format_version=33, max_format_version=60)


def test_named_struct_fields_in_order(alloc_doc: dict[str, Any]) -> None:
    """Verify names, types and visibility of named fields."""
    crate = decode(alloc_doc)
    info = extract_struct(crate.items["11"], crate, "alloc::vec::Vec")

    assert info.kind is StructKind.NAMED
    assert info.name == "alloc::vec::Vec"
    assert info.simple_name == "Vec"
    assert info.module_path == "alloc::vec"
    assert info.generic_params == ("T", "A")
    assert info.is_public
    assert [f.name for f in info.fields] == ["buf", "len"]
    assert info.fields[0].type_name == "RawVec<T, A>"
    assert info.fields[1].type_name == "usize"
    assert all(not f.is_public for f in info.fields)
    assert all(f.visibility == "default" for f in info.fields)
    assert all(f.struct_name == "alloc::vec::Vec" for f in info.fields)


def test_tuple_struct_fields_are_positional(alloc_doc: dict[str, Any]) -> None:
    """Verify that tuple fields are named by position."""
    crate = decode(alloc_doc)
    info = extract_struct(crate.items["21"], crate, "alloc::boxed::Box")

    assert info.is_tuple_struct
    assert not info.is_unit_struct
    assert [f.name for f in info.fields] == ["0", "1"]
    assert [f.type_name for f in info.fields] == ["Unique<T>", "A"]


def test_unit_struct_has_no_fields(alloc_doc: dict[str, Any]) -> None:
    """Verify unit struct detection."""
    crate = decode(alloc_doc)
    info = extract_struct(crate.items["31"], crate, "alloc::alloc::Global")
    assert info.is_unit_struct
    assert info.fields == ()


def test_non_struct_reports_kind(alloc_doc: dict[str, Any]) -> None:
    """Verify that enums are rejected with their kind."""
    crate = decode(alloc_doc)
    with pytest.raises(NotAStructError, match="found enum") as exc_info:
        extract_struct(crate.items["41"], crate, "alloc::borrow::Cow")
    assert exc_info.value.kind == "enum"
    assert exc_info.value.path == "alloc::borrow::Cow"


def test_visibility_tags_are_preserved(factory: Any) -> None:
    """Verify public, crate and restricted field visibility."""
    f = factory
    restricted = {"restricted": {"parent": "0", "path": "::demo"}}
    items = {
        "0": f.module("demo", ["1"]),
        "1": f.plain_struct("Mixed", ["2", "3", "4", "5"]),
        "2": f.field("a", f.prim("u8"), visibility="public"),
        "3": f.field("b", f.prim("u8"), visibility="crate"),
        "4": f.field("c", f.prim("u8"), visibility=restricted),
        "5": f.field("d", f.prim("u8")),
    }
    crate = decode(f.doc("demo", items))
    info = extract_struct(crate.items["1"], crate, "demo::Mixed")

    assert [f.visibility for f in info.fields] == [
        "public",
        "crate",
        "restricted(::demo)",
        "default",
    ]
    assert [f.is_public for f in info.fields] == [True, False, False, False]
    assert info.field("a") is info.fields[0]
    assert info.field("missing") is None


def test_stripped_tuple_slots_keep_positions(factory: Any) -> None:
    """Verify that stripped tuple fields are skipped without renumbering."""
    f = factory
    items = {
        "0": f.module("demo", ["1"]),
        "1": f.tuple_struct("Pair", [None, "3"]),
        "3": f.field("1", f.prim("u32"), visibility="public"),
    }
    crate = decode(f.doc("demo", items))
    info = extract_struct(crate.items["1"], crate, "demo::Pair")

    assert [f.name for f in info.fields] == ["1"]
    assert info.has_stripped_fields


def test_older_tuple_layout(factory: Any) -> None:
    """Verify the `{"tuple": {"fields": [...]}}` layout."""
    f = factory
    items = {
        "0": f.module("demo", ["1"]),
        "1": f.struct("Wrapper", {"tuple": {"fields": ["2"]}}),
        "2": f.field("0", f.prim("i64")),
    }
    crate = decode(f.doc("demo", items))
    info = extract_struct(crate.items["1"], crate, "demo::Wrapper")
    assert info.kind is StructKind.TUPLE
    assert [(f.name, f.type_name) for f in info.fields] == [("0", "i64")]


def test_oldest_struct_type_layout() -> None:
    """Verify the flat `struct_type` layout with explicit item kinds."""
    doc = {
        "format_version": 33,
        "root": "0",
        "index": {
            "0": {
                "name": "core",
                "kind": "module",
                "visibility": "public",
                "inner": {"items": ["1"]},
            },
            "1": {
                "name": "Wrapping",
                "kind": "struct",
                "visibility": "public",
                "inner": {
                    "struct_type": "tuple",
                    "fields": ["2"],
                    "fields_stripped": False,
                    "generics": {"params": [{"name": "T", "kind": {"type": {}}}]},
                },
            },
            "2": {
                "name": "0",
                "kind": "struct_field",
                "visibility": "public",
                "inner": {"generic": "T"},
            },
        },
        "paths": {},
    }
    crate = decode(doc)
    info = extract_struct(crate.items["1"], crate, "core::num::Wrapping")
    assert info.kind is StructKind.TUPLE
    assert info.generic_params == ("T",)
    assert [(f.name, f.type_name, f.is_public) for f in info.fields] == [
        ("0", "T", True)
    ]


def test_missing_field_item_is_structural_error(factory: Any) -> None:
    """Verify that a dangling field id is reported."""
    f = factory
    items = {
        "0": f.module("demo", ["1"]),
        "1": f.plain_struct("Bad", ["99"]),
    }
    crate = decode(f.doc("demo", items))
    with pytest.raises(StructuralError, match="missing field item 99"):
        extract_struct(crate.items["1"], crate, "demo::Bad")


def test_field_of_wrong_kind_is_structural_error(factory: Any) -> None:
    """Verify that a field id pointing at a non-field is reported."""
    f = factory
    items = {
        "0": f.module("demo", ["1"]),
        "1": f.plain_struct("Bad", ["2"]),
        "2": f.function("oops"),
    }
    crate = decode(f.doc("demo", items))
    with pytest.raises(StructuralError, match="not a struct field"):
        extract_struct(crate.items["1"], crate, "demo::Bad")


def test_unknown_kind_payload_is_structural_error(factory: Any) -> None:
    """Verify that unrecognised struct kinds are reported."""
    f = factory
    items = {
        "0": f.module("demo", ["1"]),
        "1": f.struct("Odd", {"record": {"fields": []}}),
    }
    crate = decode(f.doc("demo", items))
    with pytest.raises(StructuralError, match="unknown kind 'record'"):
        extract_struct(crate.items["1"], crate, "demo::Odd")
