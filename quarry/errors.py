"""Exception hierarchy for struct analysis failures."""


class QuarryError(Exception):
    """Base exception for all quarry failures."""


class TypeNotFoundError(QuarryError):
    """Raised when a full path does not match any indexed item."""

    def __init__(self, path: str, message: str | None = None) -> None:
        """Store the requested path alongside the message."""
        super().__init__(
            message
            or (
                f"Type '{path}' not found. Please provide the full module path "
                "(e.g. 'alloc::string::String')"
            )
        )
        self.path = path


class AmbiguousPathError(TypeNotFoundError):
    """Raised when a path maps to more than one item in the same namespace."""

    def __init__(self, path: str, candidates: list[str]) -> None:
        """Record the competing targets for diagnostics."""
        super().__init__(
            path,
            f"Path '{path}' is ambiguous: {', '.join(sorted(candidates))}",
        )
        self.candidates = sorted(candidates)


class NotAStructError(QuarryError):
    """Raised when a path resolves to an item that is not a struct."""

    def __init__(self, path: str, kind: str) -> None:
        """Record the item kind that was found instead."""
        super().__init__(f"Type '{path}' is not a struct (found {kind})")
        self.path = path
        self.kind = kind


class StructuralError(QuarryError):
    """Raised when a struct's field payload has an unexpected shape."""


class AnalysisError(QuarryError):
    """Raised when the documentation artifact cannot be produced or decoded."""


class ToolInvocationError(AnalysisError):
    """Raised when the documentation tool fails to run to completion."""

    def __init__(
        self, message: str, *, returncode: int | None = None, stderr: str = ""
    ) -> None:
        """Keep the process exit code and error output."""
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class ToolchainMissingError(ToolInvocationError):
    """Raised when a required executable, toolchain or component is absent."""


class SchemaDecodeError(AnalysisError):
    """Raised when the artifact's top-level shape is not a usable rustdoc document."""


class QuarryIOError(QuarryError):
    """Raised for filesystem failures around the artifact."""


class ArtifactIOError(QuarryIOError):
    """Raised when an artifact exists but cannot be read."""


class ArtifactNotFoundError(QuarryIOError):
    """Raised when the tool ran but the expected artifact is missing."""


class CacheBusyError(QuarryError):
    """Raised when a bounded wait for cache initialization expires."""
