"""Helpers for classifying rustdoc item kinds and namespaces."""

from typing import Any

REEXPORT_KINDS = {"use", "import"}
VALUE_KINDS = {"function", "constant", "static", "assoc_const"}
MACRO_KINDS = {"macro", "proc_macro"}

# Lookup order when a path exists in several namespaces.
NAMESPACE_ORDER = ("type", "value", "macro")


def kind_of(item: dict[str, Any]) -> str | None:
    """Return the item kind, from `inner` (current schema) or `kind` (older)."""
    kind = item.get("kind")
    if isinstance(kind, str) and kind:
        return kind
    inner = item.get("inner")
    if isinstance(inner, dict) and len(inner) == 1:
        return next(iter(inner))
    if isinstance(inner, str) and inner:
        return inner
    return None


def payload_of(item: dict[str, Any], kind: str) -> dict[str, Any]:
    """Return the kind-specific body of an item."""
    inner = item.get("inner")
    if not isinstance(inner, dict):
        return {}
    body = inner.get(kind, inner)
    return body if isinstance(body, dict) else {}


def namespace_of_kind(kind: str) -> str:
    """Map an item kind to the Rust namespace its name lives in."""
    if kind in MACRO_KINDS:
        return "macro"
    if kind in VALUE_KINDS:
        return "value"
    return "type"


def is_reexport_kind(kind: str) -> bool:
    """Check if the kind represents a `use` re-export."""
    return kind in REEXPORT_KINDS


def is_module_kind(kind: str) -> bool:
    """Check if the kind represents a module."""
    return kind == "module"


def visibility_tag(value: object) -> str | None:
    """Render a rustdoc visibility value as a tag string.

    `"public"`, `"default"` and `"crate"` are kept as is; restricted
    visibility becomes `restricted(<path>)`.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, dict) and "restricted" in value:
        restricted = value["restricted"] or {}
        path = restricted.get("path", "") if isinstance(restricted, dict) else ""
        return f"restricted({path})"
    return None
