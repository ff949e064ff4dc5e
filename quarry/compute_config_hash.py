"""Logic for computing stable hashes of configuration objects."""

import hashlib
import json
from collections.abc import Iterable
from typing import Any


def compute_config_hash(
    config: dict[str, Any], keys: Iterable[str] | None = None
) -> str:
    """Compute a stable hash of the configuration.

    With `keys`, only those settings take part (absent ones hash as null), so
    options that do not change the generated docs keep the same digest.
    Values are serialized as canonical JSON with sorted keys.
    """
    if keys is not None:
        config = {key: config.get(key) for key in keys}
    config_json = json.dumps(config, sort_keys=True, ensure_ascii=True, default=str)
    return hashlib.sha256(config_json.encode("utf-8")).hexdigest()
