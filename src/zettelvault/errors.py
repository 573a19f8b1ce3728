"""Exception hierarchy and batch-failure aggregation."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class VaultError(Exception):
    """Base exception for all vault errors.

    Attributes:
        message: Human-readable error message
        details: Additional context about the error
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


class ConfigError(VaultError):
    """Raised when configuration cannot be read or holds invalid values."""


class StorageUnavailable(VaultError):
    """The notes directory is not configured or cannot be created."""

    def __init__(self, message: str = "No vault location configured", path: Path | None = None) -> None:
        super().__init__(message, details={"path": str(path)} if path else None)
        self.path = path


class IOFailure(VaultError):
    """A read, write or move of a single file failed."""

    def __init__(self, operation: str, path: Path, reason: str) -> None:
        super().__init__(
            f"Failed to {operation} {path.name}: {reason}",
            details={"path": str(path), "operation": operation},
        )
        self.operation = operation
        self.path = path


class ParseFailure(VaultError):
    """Text is not a recognised note (no front matter or no ``id``).

    Never raised by the codec itself; batch operations record it for files
    they skip.
    """

    def __init__(self, source: str, reason: str = "missing front matter id") -> None:
        super().__init__(f"Not a note: {source} ({reason})", details={"source": source})
        self.source = source


@dataclass
class BatchFailure:
    target: str
    error: Exception

    def to_dict(self) -> dict[str, str]:
        return {"target": self.target, "error": str(self.error)}


@dataclass
class BatchResult(Generic[T]):
    """Outcome of a batch operation: what succeeded and what did not."""

    items: list[T] = field(default_factory=list)
    failures: list[BatchFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def fail(self, target: str, error: Exception) -> None:
        self.failures.append(BatchFailure(target, error))

    def raise_for_failures(self) -> None:
        """Raise the first recorded failure, annotated with the total count."""
        if self.failures:
            first = self.failures[0]
            raise VaultError(
                f"{len(self.failures)} item(s) failed; first: {first.target}: {first.error}",
                details={"failed": len(self.failures), "succeeded": len(self.items)},
            ) from first.error
