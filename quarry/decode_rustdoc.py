"""Logic for decoding a rustdoc JSON document into a crate index."""

import logging
from typing import Any

from quarry.crate_index import CrateIndex, PathSummary
from quarry.errors import SchemaDecodeError
from quarry.item_kind import is_module_kind, kind_of, payload_of, visibility_tag
from quarry.raw_item import RawItem

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ("format_version", "index", "root", "paths")


def decode_rustdoc(
    doc: object,
    *,
    min_format_version: int,
    max_format_version: int,
    source: str = "<memory>",
) -> CrateIndex:
    """Decode a parsed rustdoc document into a CrateIndex.

    Top-level problems raise SchemaDecodeError. Individual items that lack a
    kind or a visibility are skipped and recorded in `CrateIndex.skipped`.
    """
    if not isinstance(doc, dict):
        msg = f"{source}: rustdoc document must be a JSON object"
        raise SchemaDecodeError(msg)

    missing = [key for key in REQUIRED_KEYS if key not in doc]
    if missing:
        msg = f"{source}: missing top-level field(s): {', '.join(missing)}"
        raise SchemaDecodeError(msg)

    version = doc["format_version"]
    if not isinstance(version, int) or isinstance(version, bool):
        msg = f"{source}: format_version must be an integer, got {version!r}"
        raise SchemaDecodeError(msg)
    if not min_format_version <= version <= max_format_version:
        msg = (
            f"{source}: unsupported rustdoc format version {version} "
            f"(supported: {min_format_version}..{max_format_version}; "
            "raise schema.max_format_version in the config for newer toolchains)"
        )
        raise SchemaDecodeError(msg)

    index = doc["index"]
    paths = doc["paths"]
    if not isinstance(index, dict) or not isinstance(paths, dict):
        msg = f"{source}: 'index' and 'paths' must be JSON objects"
        raise SchemaDecodeError(msg)

    root_id = str(doc["root"])
    root = index.get(root_id)
    if not isinstance(root, dict) or not is_module_kind(kind_of(root) or ""):
        msg = f"{source}: root item {root_id} is not a module in the index"
        raise SchemaDecodeError(msg)
    crate_name = root.get("name")
    if not isinstance(crate_name, str) or not crate_name:
        msg = f"{source}: root module has no crate name"
        raise SchemaDecodeError(msg)
    if visibility_tag(root.get("visibility")) is None:
        msg = f"{source}: root module {crate_name} has no visibility"
        raise SchemaDecodeError(msg)

    crate = CrateIndex(
        crate_name=crate_name,
        format_version=version,
        root_id=root_id,
        items={},
        paths=_decode_paths(paths),
        external_crates=_decode_external_crates(doc.get("external_crates")),
    )

    for key, raw in index.items():
        item_id = str(key)
        reason = _decode_item(crate, item_id, raw)
        if reason:
            crate.skipped[item_id] = reason
            logger.debug("Skipping item %s in %s: %s", item_id, crate_name, reason)

    _link_parents(crate)

    logger.debug(
        "Decoded %s (format %d): %d items, %d skipped",
        crate_name,
        version,
        len(crate.items),
        len(crate.skipped),
    )
    return crate


def _decode_item(crate: CrateIndex, item_id: str, raw: Any) -> str | None:
    """Add one item to the crate; return a reason string if it was skipped."""
    if not isinstance(raw, dict):
        return "item is not an object"

    kind = kind_of(raw)
    if not kind:
        return "missing item kind"

    visibility = visibility_tag(raw.get("visibility"))
    if visibility is None:
        return "missing visibility"

    name = raw.get("name")
    crate.items[item_id] = RawItem(
        item_id=item_id,
        crate=crate.crate_name,
        kind=kind,
        name=name if isinstance(name, str) and name else None,
        parent_id=None,
        visibility=visibility,
        payload=payload_of(raw, kind),
        raw=raw,
    )
    return None


def _link_parents(crate: CrateIndex) -> None:
    """Derive each item's owning module from module membership lists."""
    for item in crate.items.values():
        if not is_module_kind(item.kind):
            continue
        for child_id in item.payload.get("items") or []:
            child = crate.get(child_id)
            if child is not None and child.parent_id is None:
                child.parent_id = item.item_id


def _decode_paths(paths: dict[str, Any]) -> dict[str, PathSummary]:
    """Decode the `paths` table, ignoring malformed entries."""
    result: dict[str, PathSummary] = {}
    for key, entry in paths.items():
        try:
            segments = entry["path"]
            if not isinstance(segments, list) or not segments:
                continue
            result[str(key)] = PathSummary(
                crate_id=int(entry["crate_id"]),
                path=tuple(str(s) for s in segments),
                kind=str(entry["kind"]),
            )
        except (KeyError, TypeError, ValueError):
            logger.debug("Ignoring malformed paths entry %s", key)
    return result


def _decode_external_crates(external: object) -> dict[int, str]:
    """Map external crate ids to crate names."""
    result: dict[int, str] = {}
    if not isinstance(external, dict):
        return result
    for key, entry in external.items():
        if isinstance(entry, dict) and isinstance(entry.get("name"), str):
            try:
                result[int(key)] = entry["name"]
            except ValueError:
                continue
    return result
