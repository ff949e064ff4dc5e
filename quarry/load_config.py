"""Logic for loading and merging configuration files."""

import copy
from pathlib import Path
from typing import Any

import yaml

from quarry.deep_merge import deep_merge

DEFAULT_CONFIG: dict[str, Any] = {
    "toolchain": {
        "channel": "nightly",
        "rustc": "rustc",
        "cargo": "cargo",
    },
    "crates": ["std", "alloc", "core"],
    "workspace": None,  # None: the standard library sources of the sysroot
    "target_dir": None,  # None: <tmp>/quarry_docs/<config hash>
    "reuse_artifacts": False,
    "timeout_seconds": None,
    "document_private_items": True,
    "artifacts": [],  # prebuilt rustdoc JSON files; skips the tool when set
    "schema": {
        "min_format_version": 33,
        "max_format_version": 60,
    },
    "path_overrides": {},
}


def load_config(path: str | None = None) -> dict[str, Any]:
    """Load configuration from a YAML file and merge it with defaults."""
    config = copy.deepcopy(DEFAULT_CONFIG)
    if path:
        p = Path(path)
        if p.exists():
            user_config = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
            config = deep_merge(config, user_config)
    return config
