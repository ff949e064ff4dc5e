"""Shared fixtures that build small rustdoc JSON documents."""

from typing import Any

import pytest

from quarry.crate_index import CrateIndex
from quarry.decode_rustdoc import decode_rustdoc

FORMAT_VERSION = 45


class RustdocFactory:
    """Builds rustdoc items in the current (externally tagged) layout."""

    def item(
        self, name: str | None, inner: dict[str, Any], visibility: Any = "public"
    ) -> dict[str, Any]:
        """Create a bare item; the id is filled in by `doc`."""
        return {
            "crate_id": 0,
            "name": name,
            "span": None,
            "visibility": visibility,
            "docs": None,
            "links": {},
            "attrs": [],
            "deprecation": None,
            "inner": inner,
        }

    def module(
        self, name: str, items: list[str], visibility: Any = "public"
    ) -> dict[str, Any]:
        """Create a module item."""
        body = {"is_crate": False, "items": items, "is_stripped": False}
        return self.item(name, {"module": body}, visibility)

    def generics(self, *names: str) -> dict[str, Any]:
        """Create a generics block with plain type parameters."""
        params = [
            {"name": n, "kind": {"type": {"bounds": [], "default": None}}}
            for n in names
        ]
        return {"params": params, "where_predicates": []}

    def struct(
        self,
        name: str,
        kind: Any,
        generics: tuple[str, ...] = (),
        visibility: Any = "public",
    ) -> dict[str, Any]:
        """Create a struct item from a raw kind payload."""
        body = {"kind": kind, "generics": self.generics(*generics), "impls": []}
        return self.item(name, {"struct": body}, visibility)

    def plain_struct(
        self, name: str, field_ids: list[str], generics: tuple[str, ...] = ()
    ) -> dict[str, Any]:
        """Create a struct with named fields."""
        kind = {"plain": {"fields": field_ids, "has_stripped_fields": False}}
        return self.struct(name, kind, generics)

    def tuple_struct(
        self, name: str, slots: list[str | None], generics: tuple[str, ...] = ()
    ) -> dict[str, Any]:
        """Create a tuple struct; None marks a stripped slot."""
        return self.struct(name, {"tuple": slots}, generics)

    def unit_struct(self, name: str) -> dict[str, Any]:
        """Create a unit struct."""
        return self.struct(name, "unit")

    def field(
        self, name: str, ty: dict[str, Any], visibility: Any = "default"
    ) -> dict[str, Any]:
        """Create a struct field item."""
        return self.item(name, {"struct_field": ty}, visibility)

    def use(
        self,
        name: str,
        target_id: str | None,
        source: str,
        glob: bool = False,
        visibility: Any = "public",
    ) -> dict[str, Any]:
        """Create a `use` re-export item."""
        body = {"source": source, "name": name, "id": target_id, "is_glob": glob}
        return self.item(None, {"use": body}, visibility)

    def enum(self, name: str) -> dict[str, Any]:
        """Create an enum item without variants."""
        body = {"generics": self.generics(), "has_stripped_variants": False}
        return self.item(name, {"enum": {**body, "variants": [], "impls": []}})

    def trait(self, name: str) -> dict[str, Any]:
        """Create a trait item."""
        body = {"is_auto": False, "is_unsafe": False, "items": [], "bounds": []}
        return self.item(name, {"trait": body})

    def function(self, name: str) -> dict[str, Any]:
        """Create a function item."""
        return self.item(name, {"function": {"sig": {"inputs": [], "output": None}}})

    def prim(self, name: str) -> dict[str, Any]:
        """Create a primitive type."""
        return {"primitive": name}

    def generic(self, name: str) -> dict[str, Any]:
        """Create a generic parameter type."""
        return {"generic": name}

    def path(self, path: str, *args: dict[str, Any]) -> dict[str, Any]:
        """Create a resolved path type with optional type arguments."""
        rendered_args = None
        if args:
            rendered_args = {
                "angle_bracketed": {
                    "args": [{"type": a} for a in args],
                    "constraints": [],
                }
            }
        return {"resolved_path": {"path": path, "id": "0", "args": rendered_args}}

    def summary(self, crate_id: int, path: str, kind: str) -> dict[str, Any]:
        """Create a `paths` table entry."""
        return {"crate_id": crate_id, "path": path.split("::"), "kind": kind}

    def doc(
        self,
        crate_name: str,
        items: dict[str, dict[str, Any]],
        paths: dict[str, dict[str, Any]] | None = None,
        external: dict[str, str] | None = None,
        version: int = FORMAT_VERSION,
    ) -> dict[str, Any]:
        """Assemble a document; item "0" must be the root module."""
        items["0"]["name"] = crate_name
        items["0"]["inner"]["module"]["is_crate"] = True
        for item_id, item in items.items():
            item["id"] = item_id
        return {
            "root": "0",
            "crate_version": None,
            "includes_private": True,
            "index": items,
            "paths": paths or {},
            "external_crates": {
                key: {"name": name, "html_root_url": None}
                for key, name in (external or {}).items()
            },
            "format_version": version,
        }


@pytest.fixture
def factory() -> RustdocFactory:
    """Fixture providing the rustdoc item factory."""
    return RustdocFactory()


@pytest.fixture
def alloc_doc(factory: RustdocFactory) -> dict[str, Any]:
    """A small `alloc` crate with named, tuple and unit structs."""
    f = factory
    items = {
        "0": f.module("alloc", ["1", "10", "20", "30", "40"]),
        "1": f.module("string", ["2"]),
        "2": f.plain_struct("String", ["3"]),
        "3": f.field("vec", f.path("Vec", f.prim("u8"))),
        "10": f.module("vec", ["11"]),
        "11": f.plain_struct("Vec", ["12", "13"], generics=("T", "A")),
        "12": f.field("buf", f.path("RawVec", f.generic("T"), f.generic("A"))),
        "13": f.field("len", f.prim("usize")),
        "20": f.module("boxed", ["21"]),
        "21": f.tuple_struct("Box", ["22", "23"], generics=("T", "A")),
        "22": f.field("0", f.path("Unique", f.generic("T"))),
        "23": f.field("1", f.generic("A")),
        "30": f.module("alloc", ["31", "32"]),
        "31": f.unit_struct("Global"),
        "32": f.trait("Allocator"),
        "40": f.module("borrow", ["41"]),
        "41": f.enum("Cow"),
    }
    paths = {
        "2": f.summary(0, "alloc::string::String", "struct"),
        "11": f.summary(0, "alloc::vec::Vec", "struct"),
        "21": f.summary(0, "alloc::boxed::Box", "struct"),
        "31": f.summary(0, "alloc::alloc::Global", "struct"),
        "41": f.summary(0, "alloc::borrow::Cow", "enum"),
    }
    return f.doc("alloc", items, paths)


@pytest.fixture
def std_doc(factory: RustdocFactory) -> dict[str, Any]:
    """A small `std` crate that re-exports items from `alloc`."""
    f = factory
    items = {
        "0": f.module("std", ["1", "2", "5", "8"]),
        "1": f.module("string", ["3"]),
        "3": f.use("String", "100", "alloc::string::String"),
        "2": f.module("collections", ["4", "6"]),
        "4": f.use("HashMap", "10", "self::hash::map::HashMap"),
        "6": f.module("hash", ["9"], visibility="default"),
        "9": f.module("map", ["10"]),
        "10": f.plain_struct("HashMap", ["11"], generics=("K", "V", "S")),
        "11": f.field(
            "base",
            f.path("base::HashMap", f.generic("K"), f.generic("V"), f.generic("S")),
        ),
        "5": f.module("vec", ["12"]),
        "12": f.use("vec", "101", "alloc::vec", glob=True),
        "8": f.use("boxed", "102", "alloc::boxed"),
    }
    paths = {
        "10": f.summary(0, "std::collections::hash::map::HashMap", "struct"),
        "100": f.summary(1, "alloc::string::String", "struct"),
        "101": f.summary(1, "alloc::vec", "module"),
        "102": f.summary(1, "alloc::boxed", "module"),
    }
    return f.doc("std", items, paths, external={"1": "alloc"})


def _decode(doc: dict[str, Any]) -> CrateIndex:
    """Decode a document with the default supported version range."""
    return decode_rustdoc(doc, min_format_version=33, max_format_version=60)


@pytest.fixture
def crates(alloc_doc: dict[str, Any], std_doc: dict[str, Any]) -> list[CrateIndex]:
    """Both sample crates, decoded."""
    return [_decode(alloc_doc), _decode(std_doc)]
