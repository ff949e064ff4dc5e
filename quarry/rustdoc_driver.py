"""Logic for running cargo doc in JSON mode and locating its artifacts."""

import logging
import os
import subprocess
import tempfile
from pathlib import Path
from typing import Any

from quarry.compute_config_hash import compute_config_hash
from quarry.errors import (
    ArtifactNotFoundError,
    ToolchainMissingError,
    ToolInvocationError,
)

logger = logging.getLogger(__name__)

# Config keys that change what the tool produces.
ARTIFACT_KEYS = ("toolchain", "crates", "workspace", "document_private_items")
RUSTDOC_FLAGS = "-Z unstable-options --output-format json"


class RustdocDriver:
    """Produces rustdoc JSON artifacts for the configured crates."""

    def __init__(self, config: dict[str, Any]) -> None:
        """Initialize the driver from a loaded configuration."""
        self.config = config
        self.toolchain = config.get("toolchain", {})
        self.crates: list[str] = list(config.get("crates") or [])
        self.timeout = config.get("timeout_seconds")

    def _channel_args(self) -> list[str]:
        channel = self.toolchain.get("channel")
        return [f"+{channel}"] if channel else []

    def find_sysroot(self) -> Path:
        """Ask rustc for the sysroot of the configured toolchain."""
        rustc = self.toolchain.get("rustc", "rustc")
        cmd = [rustc, *self._channel_args(), "--print", "sysroot"]
        try:
            result = subprocess.run(
                cmd, capture_output=True, text=True, timeout=self.timeout
            )
        except FileNotFoundError as exc:
            msg = f"'{rustc}' was not found; is a Rust toolchain installed?"
            raise ToolchainMissingError(msg) from exc
        except subprocess.TimeoutExpired as exc:
            msg = f"'{' '.join(cmd)}' timed out"
            raise ToolInvocationError(msg) from exc

        if result.returncode != 0:
            msg = f"Could not determine the sysroot: {result.stderr.strip()}"
            raise ToolchainMissingError(
                msg, returncode=result.returncode, stderr=result.stderr
            )
        return Path(result.stdout.strip())

    def library_root(self) -> Path:
        """Return the cargo workspace that contains the crates to document."""
        workspace = self.config.get("workspace")
        root = (
            Path(workspace)
            if workspace
            else self.find_sysroot() / "lib" / "rustlib" / "src" / "rust" / "library"
        )
        if not root.is_dir():
            msg = (
                f"Library sources not found at {root}; "
                "install them with `rustup component add rust-src`"
            )
            raise ToolchainMissingError(msg)
        if not (root / "Cargo.toml").is_file():
            msg = f"No Cargo.toml found in {root}"
            raise ToolchainMissingError(msg)
        return root

    def target_dir(self) -> Path:
        """Return the deterministic directory the artifacts are written to."""
        configured = self.config.get("target_dir")
        if configured:
            return Path(configured)
        digest = compute_config_hash(self.config, ARTIFACT_KEYS)[:12]
        return Path(tempfile.gettempdir()) / "quarry_docs" / digest

    def artifact_path(self, crate: str) -> Path:
        """Return where the artifact for a crate is written."""
        return self.target_dir() / "doc" / f"{crate.replace('-', '_')}.json"

    def build_command(self) -> list[str]:
        """Build the cargo doc command line."""
        cargo = self.toolchain.get("cargo", "cargo")
        cmd = [cargo, *self._channel_args(), "doc"]
        for crate in self.crates:
            cmd += ["--package", crate]
        cmd += ["--lib", "--no-deps"]
        if self.config.get("document_private_items", True):
            cmd.append("--document-private-items")
        cmd += ["--target-dir", str(self.target_dir())]
        return cmd

    def build_env(self) -> dict[str, str]:
        """Build the environment that switches rustdoc to JSON output."""
        env = os.environ.copy()
        env["RUSTDOCFLAGS"] = RUSTDOC_FLAGS
        env["RUSTC_BOOTSTRAP"] = "1"
        env["__CARGO_DEFAULT_LIB_METADATA"] = "stable"
        return env

    def generate(self) -> dict[str, Path]:
        """Run the tool if needed and return the artifact path per crate."""
        artifacts = {crate: self.artifact_path(crate) for crate in self.crates}
        if self.config.get("reuse_artifacts") and all(
            p.is_file() for p in artifacts.values()
        ):
            logger.info("Reusing rustdoc JSON in %s", self.target_dir())
            return artifacts

        root = self.library_root()
        for path in artifacts.values():
            # Stale artifacts would hide a run that produced nothing.
            path.unlink(missing_ok=True)
        cmd = self.build_command()
        logger.info("Generating rustdoc JSON for %s", ", ".join(self.crates))
        logger.debug("Running %s in %s", " ".join(cmd), root)
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                cwd=str(root),
                env=self.build_env(),
                timeout=self.timeout,
            )
        except FileNotFoundError as exc:
            msg = f"'{cmd[0]}' was not found; is cargo installed?"
            raise ToolchainMissingError(msg) from exc
        except subprocess.TimeoutExpired as exc:
            msg = f"cargo doc did not finish within {self.timeout} seconds"
            raise ToolInvocationError(msg) from exc

        if result.returncode != 0:
            stderr = result.stderr or ""
            msg = (
                f"cargo doc failed with exit code {result.returncode}: "
                f"{stderr.strip() or 'unknown error'}"
            )
            raise ToolInvocationError(
                msg, returncode=result.returncode, stderr=stderr
            )

        for crate, path in artifacts.items():
            if not path.is_file():
                msg = f"rustdoc JSON for '{crate}' not found at {path} after generation"
                raise ArtifactNotFoundError(msg)
        return artifacts
