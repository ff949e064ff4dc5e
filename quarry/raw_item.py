"""Data models for decoded rustdoc items."""

from dataclasses import dataclass
from typing import Any, NamedTuple


class ItemRef(NamedTuple):
    """Identifies an item across artifacts: ids are only unique per crate."""

    crate: str
    item_id: str


@dataclass
class RawItem:
    """Represents one entry of a rustdoc JSON index."""

    item_id: str
    crate: str
    kind: str  # struct/enum/trait/module/use/...
    name: str | None
    parent_id: str | None  # owning module, derived from module membership
    visibility: str
    payload: dict[str, Any]  # kind-specific body, e.g. inner["struct"]
    raw: dict[str, Any]  # original parsed item

    @property
    def ref(self) -> ItemRef:
        """Return the crate-qualified reference to this item."""
        return ItemRef(self.crate, self.item_id)
