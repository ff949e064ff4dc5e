"""Providers of decoded crates for the analysis cache."""

import logging
from pathlib import Path
from typing import Any

from quarry.crate_index import CrateIndex
from quarry.decode_rustdoc import decode_rustdoc
from quarry.errors import ArtifactNotFoundError
from quarry.load_rustdoc_json import load_rustdoc_json
from quarry.rustdoc_driver import RustdocDriver

logger = logging.getLogger(__name__)


def decode_artifact(path: Path, config: dict[str, Any]) -> CrateIndex:
    """Load and decode one rustdoc JSON file."""
    schema = config["schema"]
    return decode_rustdoc(
        load_rustdoc_json(path),
        min_format_version=schema["min_format_version"],
        max_format_version=schema["max_format_version"],
        source=str(path),
    )


class RustdocSource:
    """Runs the documentation tool and decodes what it produces."""

    def __init__(
        self, config: dict[str, Any], driver: RustdocDriver | None = None
    ) -> None:
        self.config = config
        self.driver = driver or RustdocDriver(config)

    def load(self) -> list[CrateIndex]:
        """Generate the artifacts and decode one CrateIndex per crate."""
        artifacts = self.driver.generate()
        return [decode_artifact(path, self.config) for path in artifacts.values()]


class ArtifactSource:
    """Decodes prebuilt rustdoc JSON files without running any tool."""

    def __init__(self, paths: list[str | Path], config: dict[str, Any]) -> None:
        self.paths = [Path(p) for p in paths]
        self.config = config

    def load(self) -> list[CrateIndex]:
        """Decode every configured artifact."""
        crates = []
        for path in self.paths:
            if not path.is_file():
                msg = f"Configured rustdoc artifact not found: {path}"
                raise ArtifactNotFoundError(msg)
            crates.append(decode_artifact(path, self.config))
        logger.debug("Decoded %d prebuilt artifacts", len(crates))
        return crates


def source_from_config(config: dict[str, Any]) -> RustdocSource | ArtifactSource:
    """Pick the artifact source the configuration asks for."""
    artifacts = config.get("artifacts") or []
    if artifacts:
        return ArtifactSource(artifacts, config)
    return RustdocSource(config)
