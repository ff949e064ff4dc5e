"""Logic for loading rustdoc JSON artifacts from disk."""

import json
import logging
from pathlib import Path
from typing import Any

from quarry.errors import ArtifactIOError, SchemaDecodeError

logger = logging.getLogger(__name__)


def load_rustdoc_json(path: Path) -> dict[str, Any]:
    """Load and parse a rustdoc JSON file."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"Could not read rustdoc artifact {path}: {exc}"
        raise ArtifactIOError(msg) from exc
    logger.debug("Read %d bytes from %s", len(text), path)

    try:
        doc = json.loads(text)
    except json.JSONDecodeError as exc:
        msg = f"Rustdoc artifact {path} is not valid JSON: {exc}"
        raise SchemaDecodeError(msg) from exc

    if not isinstance(doc, dict):
        msg = f"Rustdoc artifact {path} is not a JSON object"
        raise SchemaDecodeError(msg)
    return doc
