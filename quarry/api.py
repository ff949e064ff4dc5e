"""Module-level query functions bound to the default struct cache."""

import os
import threading

from quarry.analysis_cache import StructCache
from quarry.artifact_source import source_from_config
from quarry.load_config import load_config
from quarry.models import CacheStats, StructInfo

CONFIG_ENV_VAR = "QUARRY_CONFIG"

_default_cache: StructCache | None = None
_default_lock = threading.Lock()


def get_default_cache() -> StructCache:
    """Return the process-wide cache, creating it on first use.

    The configuration file is read from `QUARRY_CONFIG` when it is set.
    """
    global _default_cache
    with _default_lock:
        if _default_cache is None:
            config = load_config(os.environ.get(CONFIG_ENV_VAR))
            _default_cache = StructCache(
                source_from_config(config), config.get("path_overrides")
            )
        return _default_cache


def set_default_cache(cache: StructCache | None) -> None:
    """Replace the process-wide cache; None restores lazy creation."""
    global _default_cache
    with _default_lock:
        _default_cache = cache


def mine_struct_info(path: str) -> StructInfo:
    """Return the struct information for a full path, e.g. `alloc::string::String`."""
    return get_default_cache().lookup(path)


def is_stdlib_struct(path: str) -> bool:
    """Check if a full path names a known struct."""
    return get_default_cache().contains(path)


def list_stdlib_structs(include_reexports: bool = False) -> list[str]:
    """Return every known struct path, sorted."""
    return get_default_cache().list_paths(include_reexports)


def cache_stats() -> CacheStats:
    """Return the default cache's entry count and initialization flag."""
    return get_default_cache().stats()


def clear_stdlib_cache() -> None:
    """Reset the default cache so the next query rebuilds it."""
    get_default_cache().clear()


def init_stdlib_cache(timeout: float | None = None) -> CacheStats:
    """Build the default cache eagerly."""
    cache = get_default_cache()
    cache.ensure_initialized(timeout)
    return cache.stats()
