"""Error kinds and the result type returned by public operations."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Kinds of failure surfaced by the research pipeline."""

    PROJECT_ANALYSIS = "project_analysis"
    RESEARCH = "research"
    REFERENCE_MANAGER = "reference_manager"
    CONFIGURATION = "configuration"


class ResearcherError(Exception):
    """Base error carrying a kind, a message and the wrapped cause."""

    kind: ErrorKind = ErrorKind.RESEARCH

    def __init__(self, message: str, cause: BaseException | None = None):
        self.message = message
        self.cause = cause
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "cause": repr(self.cause) if self.cause is not None else None,
        }


class ProjectAnalysisError(ResearcherError):
    """Manifest, feature or domain detection failed."""

    kind = ErrorKind.PROJECT_ANALYSIS


class ResearchError(ResearcherError):
    """Query construction, provider search or scoring failed."""

    kind = ErrorKind.RESEARCH


class ReferenceManagerError(ResearcherError):
    """Reading, writing or merging the reference store failed."""

    kind = ErrorKind.REFERENCE_MANAGER


class ConfigError(ResearcherError):
    """The research config file could not be read or written."""

    kind = ErrorKind.CONFIGURATION


@dataclass
class Result(Generic[T]):
    """Outcome of a fallible operation.

    Exactly one of ``data`` (on success) or ``error`` (on failure) is meaningful.
    """

    success: bool
    data: T | None = None
    error: ResearcherError | None = None

    @classmethod
    def ok(cls, data: T) -> "Result[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: ResearcherError) -> "Result[T]":
        return cls(success=False, error=error)

    def unwrap(self) -> T:
        """Return the data, or raise the carried error."""
        if not self.success:
            raise self.error or ResearchError("Operation failed without an error")
        return self.data  # type: ignore[return-value]
