from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorCategory(str, Enum):
    CONFIG = "config"
    DEPENDENCY = "dependency"
    RUNTIME = "runtime"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    UPSTREAM = "upstream"
    EMPTY = "empty"
    TIMEOUT = "timeout"
    CONFLICT = "conflict"


DEFAULT_EXIT_CODES: dict[ErrorCategory, int] = {
    ErrorCategory.RUNTIME: 1,
    ErrorCategory.CONFIG: 2,
    ErrorCategory.DEPENDENCY: 3,
    ErrorCategory.VALIDATION: 4,
    ErrorCategory.NOT_FOUND: 5,
    ErrorCategory.UPSTREAM: 6,
    ErrorCategory.EMPTY: 7,
    ErrorCategory.TIMEOUT: 8,
    ErrorCategory.CONFLICT: 9,
}


@dataclass
class CaptionKitError(Exception):
    """Base exception for captionkit with standardized categories."""

    message: str
    category: ErrorCategory = ErrorCategory.RUNTIME
    exit_code: int | None = None

    def __post_init__(self) -> None:
        super().__init__(self.message)
        if self.exit_code is None:
            self.exit_code = DEFAULT_EXIT_CODES.get(self.category, 1)

    def __str__(self) -> str:
        return self.message

    def label(self) -> str:
        return {
            ErrorCategory.CONFIG: "Configuration error",
            ErrorCategory.DEPENDENCY: "Dependency error",
            ErrorCategory.RUNTIME: "Runtime error",
            ErrorCategory.VALIDATION: "Invalid input",
            ErrorCategory.NOT_FOUND: "Not found",
            ErrorCategory.UPSTREAM: "Upstream error",
            ErrorCategory.EMPTY: "Nothing to export",
            ErrorCategory.TIMEOUT: "Timed out",
            ErrorCategory.CONFLICT: "Conflict",
        }.get(self.category, "Error")


class _CategorizedError(CaptionKitError):
    _category = ErrorCategory.RUNTIME

    def __init__(self, message: str, *, exit_code: int | None = None) -> None:
        super().__init__(
            message,
            category=self._category,
            exit_code=exit_code,
        )


class DependencyMissingError(_CategorizedError):
    """Raised when a required external dependency is missing."""

    _category = ErrorCategory.DEPENDENCY


class ConfigurationError(_CategorizedError):
    """Raised when configuration is invalid."""

    _category = ErrorCategory.CONFIG


class ValidationError(_CategorizedError):
    """Raised when caller input (upload, style, segment size) is rejected."""

    _category = ErrorCategory.VALIDATION


class NotFoundError(_CategorizedError):
    """Raised for unknown video or caption identifiers."""

    _category = ErrorCategory.NOT_FOUND


class UpstreamError(_CategorizedError):
    """Raised when an external service (speech API, ffmpeg) fails."""

    _category = ErrorCategory.UPSTREAM


class TranscriptionError(UpstreamError):
    pass


class RenderError(UpstreamError):
    pass


class NoCaptionsError(_CategorizedError):
    """Raised when a video has no caption segments to serialize or burn in."""

    _category = ErrorCategory.EMPTY


class TranscriptionTimeoutError(_CategorizedError):
    """Raised when waiting for a transcription exceeds its deadline."""

    _category = ErrorCategory.TIMEOUT


class TranscriptionInProgressError(_CategorizedError):
    """Raised when a transcription is already running for the same video."""

    _category = ErrorCategory.CONFLICT
