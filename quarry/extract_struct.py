"""Logic for turning a struct item into StructInfo."""

from typing import Any

from quarry.crate_index import CrateIndex
from quarry.errors import NotAStructError, StructuralError
from quarry.models import FieldInfo, StructInfo, StructKind, split_full_path
from quarry.raw_item import RawItem
from quarry.render_type import generic_param_names, render_type


def extract_struct(item: RawItem, crate: CrateIndex, full_path: str) -> StructInfo:
    """Build the StructInfo for a struct item.

    Raises NotAStructError for any other kind and StructuralError when the
    field payload does not have the expected shape.
    """
    if item.kind != "struct":
        raise NotAStructError(full_path, item.kind)

    kind, field_ids, stripped = _struct_shape(item.payload, full_path)

    fields = []
    for position, field_id in enumerate(field_ids):
        if field_id is None:
            # Stripped tuple field; later fields keep their position.
            continue
        field = crate.get(field_id)
        if field is None:
            msg = f"Struct '{full_path}' references missing field item {field_id}"
            raise StructuralError(msg)
        name = str(position) if kind is StructKind.TUPLE else field.name
        if not name:
            msg = f"Field item {field_id} of '{full_path}' has no name"
            raise StructuralError(msg)
        fields.append(
            FieldInfo(
                name=name,
                type_name=render_type(_field_type(field, full_path)),
                is_public=field.visibility == "public",
                visibility=field.visibility,
                struct_name=full_path,
            )
        )

    module_path, simple_name = split_full_path(full_path)
    return StructInfo(
        name=full_path,
        simple_name=simple_name,
        module_path=module_path,
        kind=kind,
        fields=tuple(fields),
        generic_params=generic_param_names(item.payload.get("generics")),
        is_public=item.visibility == "public",
        has_stripped_fields=stripped,
    )


def _struct_shape(
    payload: dict[str, Any], full_path: str
) -> tuple[StructKind, list[Any], bool]:
    """Return (kind, field ids, stripped flag) for any supported schema."""
    kind = payload.get("kind")
    if kind is None and "struct_type" in payload:
        # Oldest layout: struct_type next to a flat field list.
        kind = {payload["struct_type"]: {"fields": payload.get("fields", [])}}
        if payload["struct_type"] == "unit":
            kind = "unit"

    if kind == "unit":
        return StructKind.UNIT, [], False
    if not isinstance(kind, dict) or len(kind) != 1:
        msg = f"Struct '{full_path}' has an unrecognised kind payload: {kind!r}"
        raise StructuralError(msg)

    tag, body = next(iter(kind.items()))
    stripped = payload.get("fields_stripped", False)
    if isinstance(body, dict):
        stripped = body.get(
            "has_stripped_fields", body.get("fields_stripped", stripped)
        )
        body = body.get("fields")
    if not isinstance(body, list):
        msg = f"Struct '{full_path}' has a malformed {tag} field list"
        raise StructuralError(msg)

    if tag == "plain":
        if any(field_id is None for field_id in body):
            msg = f"Struct '{full_path}' has a null named field id"
            raise StructuralError(msg)
        return StructKind.NAMED, body, bool(stripped)
    if tag == "tuple":
        stripped = bool(stripped) or any(field_id is None for field_id in body)
        return StructKind.TUPLE, body, stripped
    msg = f"Struct '{full_path}' has unknown kind '{tag}'"
    raise StructuralError(msg)


def _field_type(field: RawItem, full_path: str) -> Any:
    """Return the declared type tree of a field item."""
    inner = field.raw.get("inner")
    if isinstance(inner, dict) and "struct_field" in inner:
        return inner["struct_field"]
    if field.kind == "struct_field" and isinstance(inner, dict):
        return inner
    msg = (
        f"Field item {field.item_id} of '{full_path}' is a {field.kind}, "
        "not a struct field"
    )
    raise StructuralError(msg)
