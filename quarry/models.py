"""Data models for extracted struct information."""

from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple


class StructKind(str, Enum):
    """Shape of a struct declaration."""

    NAMED = "named"
    TUPLE = "tuple"
    UNIT = "unit"


@dataclass(frozen=True)
class FieldInfo:
    """Represents one declared field of a struct."""

    name: str  # positional index for tuple fields
    type_name: str
    is_public: bool
    visibility: str  # public/default/crate/restricted(<path>)
    struct_name: str


@dataclass(frozen=True)
class StructInfo:
    """Represents a struct together with its ordered fields."""

    name: str  # e.g. alloc::string::String
    simple_name: str
    module_path: str
    kind: StructKind
    fields: tuple[FieldInfo, ...] = ()
    generic_params: tuple[str, ...] = ()
    is_public: bool = False
    has_stripped_fields: bool = False

    @property
    def is_tuple_struct(self) -> bool:
        """Return True for tuple structs."""
        return self.kind is StructKind.TUPLE

    @property
    def is_unit_struct(self) -> bool:
        """Return True for unit structs."""
        return self.kind is StructKind.UNIT

    def field(self, name: str) -> FieldInfo | None:
        """Return the field with the given name, if any."""
        for f in self.fields:
            if f.name == name:
                return f
        return None


class CacheStats(NamedTuple):
    """Snapshot of the cache's size and state."""

    count: int
    initialized: bool


def split_full_path(name: str) -> tuple[str, str]:
    """Split a full path into (module path, simple name)."""
    module_path, sep, simple_name = name.rpartition("::")
    if not sep:
        return "", name
    return module_path, simple_name
