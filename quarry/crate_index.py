"""Data models for a decoded rustdoc artifact."""

from dataclasses import dataclass, field

from quarry.raw_item import RawItem


@dataclass(frozen=True)
class PathSummary:
    """Entry of the artifact's `paths` table."""

    crate_id: int
    path: tuple[str, ...]
    kind: str

    @property
    def full_path(self) -> str:
        """Join the path segments with `::`."""
        return "::".join(self.path)


@dataclass
class CrateIndex:
    """All decoded items of one crate's artifact."""

    crate_name: str
    format_version: int
    root_id: str
    items: dict[str, RawItem]
    paths: dict[str, PathSummary] = field(default_factory=dict)
    external_crates: dict[int, str] = field(default_factory=dict)
    skipped: dict[str, str] = field(default_factory=dict)  # id -> reason

    def get(self, item_id: object) -> RawItem | None:
        """Return the item with the given id, accepting int or str ids."""
        if item_id is None:
            return None
        return self.items.get(str(item_id))

    def crate_name_for(self, crate_id: int) -> str:
        """Return the crate name for a `paths` crate id."""
        if crate_id == 0:
            return self.crate_name
        return self.external_crates.get(crate_id, f"<crate {crate_id}>")
