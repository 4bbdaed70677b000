from __future__ import annotations

from pathlib import Path
from typing import Any


class ClipJoinError(RuntimeError):
    """Base error for every failure that terminates a join run."""

    stage = "join"

    def __init__(self, message: str, *, path: str | Path | None = None) -> None:
        super().__init__(message)
        self.path = str(path) if path is not None else None


class ArgumentError(ClipJoinError, ValueError):
    stage = "arguments"


class PathResolutionError(ClipJoinError):
    stage = "paths"


class ProbeError(ClipJoinError):
    stage = "probe"


class CompatibilityError(ClipJoinError):
    """Raised when an input cannot be stream-copied together with the first file."""

    stage = "verify"


class ExtensionMismatchError(CompatibilityError):
    def __init__(self, path: str | Path, *, expected: str, actual: str) -> None:
        super().__init__(
            f"Got mismatched video extensions {actual!r} and {expected!r} for {path}",
            path=path,
        )
        self.expected = expected
        self.actual = actual


class StreamMismatchError(CompatibilityError):
    def __init__(self, path: str | Path, differences: dict[str, tuple[Any, Any]]) -> None:
        details = ", ".join(
            f"{name}: {actual!r} != {expected!r}"
            for name, (expected, actual) in differences.items()
        )
        super().__init__(f"File {path} did not match the first file's streams ({details})", path=path)
        self.differences = differences


class ManifestWriteError(ClipJoinError):
    stage = "manifest"


class ConcatExecutionError(ClipJoinError):
    stage = "concat"

    def __init__(self, message: str, *, path: str | Path | None = None, output: str = "") -> None:
        full_message = f"{message}\nOutput: {output.strip()}" if output.strip() else message
        super().__init__(full_message, path=path)
        self.output = output


class CleanupError(ClipJoinError):
    stage = "cleanup"
