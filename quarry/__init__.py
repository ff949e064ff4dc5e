"""Struct field information mined from rustdoc JSON."""

from quarry.analysis_cache import StructCache
from quarry.api import (
    cache_stats,
    clear_stdlib_cache,
    get_default_cache,
    init_stdlib_cache,
    is_stdlib_struct,
    list_stdlib_structs,
    mine_struct_info,
    set_default_cache,
)
from quarry.errors import (
    AmbiguousPathError,
    AnalysisError,
    ArtifactIOError,
    ArtifactNotFoundError,
    CacheBusyError,
    NotAStructError,
    QuarryError,
    QuarryIOError,
    SchemaDecodeError,
    StructuralError,
    ToolchainMissingError,
    ToolInvocationError,
    TypeNotFoundError,
)
from quarry.models import CacheStats, FieldInfo, StructInfo, StructKind

__all__ = [
    "AmbiguousPathError",
    "AnalysisError",
    "ArtifactIOError",
    "ArtifactNotFoundError",
    "CacheBusyError",
    "CacheStats",
    "FieldInfo",
    "NotAStructError",
    "QuarryError",
    "QuarryIOError",
    "SchemaDecodeError",
    "StructCache",
    "StructInfo",
    "StructKind",
    "StructuralError",
    "ToolInvocationError",
    "ToolchainMissingError",
    "TypeNotFoundError",
    "cache_stats",
    "clear_stdlib_cache",
    "get_default_cache",
    "init_stdlib_cache",
    "is_stdlib_struct",
    "list_stdlib_structs",
    "mine_struct_info",
    "set_default_cache",
]
