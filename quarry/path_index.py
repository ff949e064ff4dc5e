"""Logic for mapping fully-qualified paths to items across decoded crates."""

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from quarry.crate_index import CrateIndex
from quarry.errors import AmbiguousPathError, TypeNotFoundError
from quarry.item_kind import (
    NAMESPACE_ORDER,
    is_module_kind,
    is_reexport_kind,
    namespace_of_kind,
)
from quarry.raw_item import ItemRef, RawItem

logger = logging.getLogger(__name__)

MAX_PASSES = 16
MAX_PATH_DEPTH = 16
RELATIVE_PREFIXES = ("crate::", "self::", "super::", "::")

# A re-export target: a local item, or a path recorded in the `paths` table.
Target = ItemRef | str


@dataclass(frozen=True)
class _NamedReexport:
    alias: str
    target: Target
    kind: str
    public: bool


@dataclass(frozen=True)
class _Expose:
    """Exposes the public children of `source` under `prefix`."""

    prefix: str
    source: Target
    public: bool


class PathIndex:
    """Maps full paths to item references, one entry per namespace."""

    def __init__(self) -> None:
        """Initialize an empty index."""
        self._entries: dict[str, dict[str, ItemRef]] = {}  # path -> ns -> ref
        self._weak: set[tuple[str, str]] = set()  # entries that came from globs
        self._ambiguous: dict[tuple[str, str], set[ItemRef]] = {}
        self._public_paths: set[str] = set()
        self._children: dict[str, set[str]] = {}  # module path -> child paths
        self.canonical_paths: dict[ItemRef, str] = {}
        self.kinds: dict[ItemRef, str] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def define(self, path: str, item: RawItem, *, public: bool) -> None:
        """Register an item at its defining path."""
        self.canonical_paths.setdefault(item.ref, path)
        self.kinds.setdefault(item.ref, item.kind)
        self.add(path, item.ref, item.kind, public=public)

    def add(
        self,
        path: str,
        ref: ItemRef,
        kind: str,
        *,
        public: bool,
        weak: bool = False,
    ) -> bool:
        """Add a path entry; return True if the index changed.

        Weak entries (glob imports) never replace explicit ones. Two different
        items competing for one path in the same namespace make it ambiguous.
        """
        ns = namespace_of_kind(kind)
        key = (path, ns)
        slot = self._entries.get(path)
        if slot is None:
            slot = self._entries[path] = {}
            parent, sep, _ = path.rpartition("::")
            if sep:
                self._children.setdefault(parent, set()).add(path)
        if public:
            self._public_paths.add(path)

        existing = slot.get(ns)
        if existing is None:
            slot[ns] = ref
            if weak:
                self._weak.add(key)
            return True
        if existing == ref:
            if not weak:
                self._weak.discard(key)
            return False
        if weak and key not in self._weak:
            # Explicit items shadow glob imports.
            return False
        if not weak and key in self._weak:
            slot[ns] = ref
            self._weak.discard(key)
            self._ambiguous.pop(key, None)
            return True
        if key not in self._ambiguous:
            logger.debug("Ambiguous path %s (%s namespace)", path, ns)
        self._ambiguous.setdefault(key, {existing}).add(ref)
        return False

    def override(self, path: str, ref: ItemRef) -> None:
        """Force a path onto an item, discarding any discovered entry."""
        ns = namespace_of_kind(self.kinds.get(ref, ""))
        self.add(path, ref, self.kinds.get(ref, ""), public=True)
        self._entries[path][ns] = ref
        self._weak.discard((path, ns))
        self._ambiguous.pop((path, ns), None)

    def lookup(self, path: str, namespace: str | None = None) -> ItemRef | None:
        """Return the unambiguous entry for a path, or None."""
        slot = self._entries.get(path)
        if not slot:
            return None
        for ns in (namespace,) if namespace else NAMESPACE_ORDER:
            if (path, ns) in self._ambiguous:
                return None
            if ns in slot:
                return slot[ns]
        return None

    def resolve(self, path: str) -> ItemRef:
        """Resolve an exact full path to the item it denotes.

        Types are preferred over values and macros of the same name.
        """
        if path.startswith(RELATIVE_PREFIXES):
            msg = f"Relative path '{path}' is not accepted; use the full module path"
            raise TypeNotFoundError(path, msg)

        slot = self._entries.get(path) or {}
        for ns in NAMESPACE_ORDER:
            candidates = self._ambiguous.get((path, ns))
            if candidates:
                raise AmbiguousPathError(
                    path, [self.describe(ref) for ref in candidates]
                )
            if ns in slot:
                return slot[ns]
        raise TypeNotFoundError(path)

    def describe(self, ref: ItemRef) -> str:
        """Return the canonical path of an item, or a placeholder."""
        return self.canonical_paths.get(ref, f"{ref.crate}#{ref.item_id}")

    def children(self, module_path: str) -> list[str]:
        """Return the paths registered directly below a module path."""
        return sorted(self._children.get(module_path, ()))

    def is_public(self, path: str) -> bool:
        """Check if a path was registered through a public item or re-export."""
        return path in self._public_paths

    def entries(self, path: str) -> dict[str, ItemRef]:
        """Return the unambiguous namespace entries of a path."""
        slot = self._entries.get(path) or {}
        return {
            ns: ref for ns, ref in slot.items() if (path, ns) not in self._ambiguous
        }

    def iter_paths(self, kind: str | None = None) -> Iterator[tuple[str, ItemRef]]:
        """Iterate over (path, ref) pairs of the type namespace."""
        for path, slot in self._entries.items():
            ref = slot.get("type")
            if ref is None or (path, "type") in self._ambiguous:
                continue
            if kind is None or self.kinds.get(ref) == kind:
                yield path, ref


def build_path_index(
    crates: Iterable[CrateIndex],
    overrides: dict[str, str] | None = None,
) -> PathIndex:
    """Build the full-path index for a set of decoded crates.

    Each crate is walked from its root module. Re-exports are resolved after
    every crate is walked so that cross-crate targets can be found, and chains
    are collapsed so every entry points straight at the defining item.
    """
    crates = list(crates)
    index = PathIndex()
    named: list[_NamedReexport] = []
    exposes: list[_Expose] = []

    for crate in crates:
        for item in crate.items.values():
            index.kinds.setdefault(item.ref, item.kind)
        _walk_crate(crate, index, named, exposes)
    for crate in crates:
        _add_unreached(crate, index)

    _resolve_reexports(index, named, exposes)

    for alias, target in (overrides or {}).items():
        ref = index.lookup(target)
        if ref is None:
            logger.warning(
                "Ignoring path override %s -> %s: target not found", alias, target
            )
            continue
        index.override(alias, ref)

    logger.debug("Built path index with %d paths", len(index))
    return index


def _walk_crate(
    crate: CrateIndex,
    index: PathIndex,
    named: list[_NamedReexport],
    exposes: list[_Expose],
) -> None:
    """Register every item reachable through module membership."""
    root = crate.items[crate.root_id]
    index.define(crate.crate_name, root, public=True)

    stack = [(root, crate.crate_name)]
    seen = {root.item_id}
    while stack:
        module, prefix = stack.pop()
        for child_id in module.payload.get("items") or []:
            child = crate.get(child_id)
            if child is None:
                continue
            if is_reexport_kind(child.kind):
                _collect_reexport(crate, child, prefix, named, exposes)
                continue
            if not child.name:
                continue
            path = f"{prefix}::{child.name}"
            index.define(path, child, public=child.visibility == "public")
            if is_module_kind(child.kind) and child.item_id not in seen:
                seen.add(child.item_id)
                stack.append((child, path))


def _collect_reexport(
    crate: CrateIndex,
    use_item: RawItem,
    prefix: str,
    named: list[_NamedReexport],
    exposes: list[_Expose],
) -> None:
    """Record a `use` item for resolution once all crates are walked."""
    payload = use_item.payload
    target_id = payload.get("id")
    if target_id is None:
        # Primitives and unresolvable imports carry no id.
        return

    public = use_item.visibility == "public"
    target: Target
    local = crate.get(target_id)
    if local is not None:
        target, kind = local.ref, local.kind
    else:
        summary = crate.paths.get(str(target_id))
        if summary is None:
            logger.debug(
                "Dropping re-export %s in %s: unknown target %s",
                payload.get("source"),
                prefix,
                target_id,
            )
            return
        target, kind = summary.full_path, summary.kind

    if payload.get("is_glob", payload.get("glob", False)):
        exposes.append(_Expose(prefix, target, public))
        return

    name = payload.get("name")
    if isinstance(name, str) and name:
        named.append(_NamedReexport(f"{prefix}::{name}", target, kind, public))


def _add_unreached(crate: CrateIndex, index: PathIndex) -> None:
    """Register local items known only through the `paths` table."""
    for item_id, summary in crate.paths.items():
        if summary.crate_id != 0:
            continue
        item = crate.get(item_id)
        if item is None or item.ref in index.canonical_paths:
            continue
        index.define(summary.full_path, item, public=item.visibility == "public")


def _target_ref(index: PathIndex, target: Target, kind: str) -> ItemRef | None:
    if isinstance(target, ItemRef):
        return target if target in index.canonical_paths else None
    return index.lookup(target, namespace_of_kind(kind))


def _resolve_reexports(
    index: PathIndex, named: list[_NamedReexport], exposes: list[_Expose]
) -> None:
    """Resolve re-exports in passes until nothing changes."""
    pending = list(named)
    tasks = list(exposes)
    known = set(tasks)

    for _ in range(MAX_PASSES):
        changed = False

        unresolved = []
        for reexport in pending:
            ref = _target_ref(index, reexport.target, reexport.kind)
            if ref is None:
                unresolved.append(reexport)
                continue
            kind = index.kinds.get(ref, reexport.kind)
            changed |= index.add(reexport.alias, ref, kind, public=reexport.public)
            if is_module_kind(kind):
                task = _Expose(reexport.alias, ref, reexport.public)
                if task not in known:
                    known.add(task)
                    tasks.append(task)
        pending = unresolved

        for task in list(tasks):
            changed |= _run_expose(index, task, tasks, known)

        if not changed:
            break

    for reexport in pending:
        logger.debug(
            "Dropping re-export %s: target %s was not loaded",
            reexport.alias,
            reexport.target,
        )


def _run_expose(
    index: PathIndex, task: _Expose, tasks: list[_Expose], known: set[_Expose]
) -> bool:
    """Add weak entries for the public children of a module."""
    source_ref = _target_ref(index, task.source, "module")
    if source_ref is None:
        return False
    source = index.canonical_paths[source_ref]
    if task.prefix == source:
        return False

    changed = False
    for child in index.children(source):
        if not index.is_public(child):
            continue
        alias = f"{task.prefix}::{child.rpartition('::')[2]}"
        if alias.count("::") >= MAX_PATH_DEPTH:
            continue
        for ref in index.entries(child).values():
            kind = index.kinds.get(ref, "")
            changed |= index.add(alias, ref, kind, public=task.public, weak=True)
            if not is_module_kind(kind):
                continue
            # A module mirrored inside itself would nest forever.
            module_path = index.describe(ref)
            if alias.startswith(f"{module_path}::"):
                continue
            sub = _Expose(alias, ref, task.public)
            if sub not in known:
                known.add(sub)
                tasks.append(sub)
                changed = True
    return changed
