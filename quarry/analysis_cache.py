"""Thread-safe, initialize-once cache of extracted struct information."""

import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Protocol

from quarry.crate_index import CrateIndex
from quarry.errors import CacheBusyError, NotAStructError, QuarryError, StructuralError
from quarry.extract_struct import extract_struct
from quarry.models import CacheStats, StructInfo
from quarry.path_index import PathIndex, build_path_index

logger = logging.getLogger(__name__)


class CrateSource(Protocol):
    """Anything that can produce decoded crates."""

    def load(self) -> list[CrateIndex]: ...


@dataclass(frozen=True)
class CacheSnapshot:
    """One fully built generation of the cache."""

    index: PathIndex
    structs: dict[str, StructInfo]  # canonical path -> info
    failures: dict[str, str] = field(default_factory=dict)  # canonical path -> error


def build_snapshot(
    crates: Iterable[CrateIndex], path_overrides: dict[str, str] | None = None
) -> CacheSnapshot:
    """Index the crates and extract every struct up front.

    A struct whose payload cannot be read is logged and recorded as a failure
    instead of aborting the whole build.
    """
    by_name: dict[str, CrateIndex] = {}
    for crate in crates:
        if crate.crate_name in by_name:
            logger.warning(
                "Crate %s was loaded twice; keeping the last", crate.crate_name
            )
        by_name[crate.crate_name] = crate

    index = build_path_index(by_name.values(), path_overrides)
    structs: dict[str, StructInfo] = {}
    failures: dict[str, str] = {}
    for path, ref in index.iter_paths(kind="struct"):
        if index.canonical_paths.get(ref) != path:
            continue
        crate = by_name[ref.crate]
        try:
            structs[path] = extract_struct(crate.items[ref.item_id], crate, path)
        except StructuralError as exc:
            logger.warning("Skipping struct %s: %s", path, exc)
            failures[path] = str(exc)

    return CacheSnapshot(index=index, structs=structs, failures=failures)


class StructCache:
    """Maps full paths to StructInfo, built once from a crate source.

    Readers work on an immutable snapshot that is published by a single
    assignment, so they never see a partially built generation.
    """

    def __init__(
        self, source: CrateSource, path_overrides: dict[str, str] | None = None
    ) -> None:
        self._source = source
        self._path_overrides = path_overrides or {}
        self._lock = threading.Lock()
        self._snapshot: CacheSnapshot | None = None

    def ensure_initialized(self, timeout: float | None = None) -> CacheSnapshot:
        """Build the cache if needed and return the current snapshot.

        Concurrent callers wait for the build in flight. With a timeout,
        CacheBusyError is raised once the wait expires. A negative timeout
        waits without limit, as None does.
        """
        snapshot = self._snapshot
        if snapshot is not None:
            return snapshot

        if timeout is None or timeout < 0:
            timeout = -1
        acquired = self._lock.acquire(timeout=timeout)
        if not acquired:
            msg = f"Cache initialization still running after {timeout} seconds"
            raise CacheBusyError(msg)
        try:
            if self._snapshot is None:
                logger.info("Initializing struct cache")
                crates = self._source.load()
                self._snapshot = build_snapshot(crates, self._path_overrides)
                logger.info(
                    "Struct cache ready: %d structs from %d crates",
                    len(self._snapshot.structs),
                    len(crates),
                )
            return self._snapshot
        finally:
            self._lock.release()

    def lookup(self, path: str) -> StructInfo:
        """Return the StructInfo for an exact full path or its re-export target."""
        snapshot = self.ensure_initialized()
        info = snapshot.structs.get(path)
        if info is not None:
            return info

        ref = snapshot.index.resolve(path)
        canonical = snapshot.index.describe(ref)
        if canonical in snapshot.structs:
            return snapshot.structs[canonical]
        if canonical in snapshot.failures:
            raise StructuralError(snapshot.failures[canonical])
        raise NotAStructError(path, snapshot.index.kinds.get(ref, "unknown"))

    def contains(self, path: str) -> bool:
        """Check if a path names a struct; never raises."""
        try:
            self.lookup(path)
        except QuarryError as exc:
            logger.debug("'%s' is not a known struct: %s", path, exc)
            return False
        return True

    def list_paths(self, include_reexports: bool = False) -> list[str]:
        """Return the sorted struct paths, canonical ones unless asked otherwise."""
        snapshot = self.ensure_initialized()
        paths = set(snapshot.structs)
        if include_reexports:
            for path, ref in snapshot.index.iter_paths(kind="struct"):
                if snapshot.index.describe(ref) in snapshot.structs:
                    paths.add(path)
        return sorted(paths)

    def stats(self) -> CacheStats:
        """Return the entry count and initialization flag without initializing."""
        snapshot = self._snapshot
        if snapshot is None:
            return CacheStats(0, False)
        return CacheStats(len(snapshot.structs), True)

    def clear(self) -> None:
        """Drop the current generation; the next lookup rebuilds it."""
        with self._lock:
            self._snapshot = None
        logger.debug("Struct cache cleared")
