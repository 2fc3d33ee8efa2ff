"""Error values returned by the Instapaper, arXiv and vault collaborators.

Errors are plain frozen values, not exceptions: each carries an ``ErrorKind``
plus the context needed to explain it, and ``describe()`` renders the
human-readable form shown to the user.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

DEFAULT_RETRY_AFTER = 60  # seconds, when a 429 has no usable Retry-After


class ErrorKind(str, Enum):
    AUTH_FAILED = "AUTH_FAILED"
    NETWORK_ERROR = "NETWORK_ERROR"
    RATE_LIMITED = "RATE_LIMITED"
    INVALID_RESPONSE = "INVALID_RESPONSE"
    PARSE_ERROR = "PARSE_ERROR"
    INVALID_PATH = "INVALID_PATH"
    FOLDER_CREATE_FAILED = "FOLDER_CREATE_FAILED"
    FILE_READ_FAILED = "FILE_READ_FAILED"
    FILE_WRITE_FAILED = "FILE_WRITE_FAILED"
    NOT_FOUND = "NOT_FOUND"
    INVALID_URL = "INVALID_URL"
    INVALID_ID = "INVALID_ID"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


@dataclass(frozen=True)
class ServiceError:
    """Base error value for a single collaborator call."""

    kind: ErrorKind
    message: str = ""

    def describe(self) -> str:
        if self.kind == ErrorKind.AUTH_FAILED:
            return "Invalid Instapaper credentials. Please check your settings."
        if self.kind == ErrorKind.NETWORK_ERROR:
            return "Network error. Please check your connection."
        return self.message or self._fallback()

    def _fallback(self) -> str:
        return "Unknown error"


@dataclass(frozen=True)
class InstapaperError(ServiceError):
    retry_after: Optional[int] = None

    def describe(self) -> str:
        if self.kind == ErrorKind.RATE_LIMITED:
            wait = self.retry_after if self.retry_after is not None else DEFAULT_RETRY_AFTER
            return f"Rate limited. Please try again in {wait} seconds."
        return super().describe()


@dataclass(frozen=True)
class ArxivError(ServiceError):
    url: str = ""
    arxiv_id: str = ""
    retry_after: Optional[int] = None

    def describe(self) -> str:
        if self.kind == ErrorKind.RATE_LIMITED:
            wait = self.retry_after if self.retry_after is not None else DEFAULT_RETRY_AFTER
            return f"Rate limited. Please try again in {wait} seconds."
        return super().describe()

    def _fallback(self) -> str:
        if self.kind == ErrorKind.INVALID_URL:
            return f"Not an arXiv paper URL: {self.url}"
        if self.kind == ErrorKind.INVALID_ID:
            return f"Invalid arXiv identifier: {self.arxiv_id}"
        if self.kind == ErrorKind.NOT_FOUND:
            return f"arXiv paper not found: {self.arxiv_id}"
        return super()._fallback()


@dataclass(frozen=True)
class VaultError(ServiceError):
    path: str = ""

    def _fallback(self) -> str:
        if self.kind == ErrorKind.INVALID_PATH:
            return f"Invalid vault path: {self.path}"
        if self.kind == ErrorKind.FOLDER_CREATE_FAILED:
            return f"Could not create folder: {self.path}"
        if self.kind == ErrorKind.NOT_FOUND:
            return f"File not found: {self.path}"
        return f"{self.kind.value} for {self.path}"


class SyncErrorKind(str, Enum):
    PARTIAL_FAILURE = "PARTIAL_FAILURE"
    COMPLETE_FAILURE = "COMPLETE_FAILURE"


@dataclass(frozen=True)
class SyncError:
    """Terminal outcome of a sync run that did not fully succeed.

    ``PARTIAL_FAILURE`` carries the final counts and every collaborator error
    collected along the way; ``COMPLETE_FAILURE`` wraps the single root cause
    that stopped the run before any paper was processed.
    """

    kind: SyncErrorKind
    successful: int = 0
    failed: int = 0
    errors: Tuple[ServiceError, ...] = field(default_factory=tuple)
    error: Optional[ServiceError] = None

    @classmethod
    def partial(cls, successful: int, failed: int, errors) -> "SyncError":
        return cls(
            kind=SyncErrorKind.PARTIAL_FAILURE,
            successful=successful,
            failed=failed,
            errors=tuple(errors),
        )

    @classmethod
    def complete(cls, error: ServiceError) -> "SyncError":
        return cls(kind=SyncErrorKind.COMPLETE_FAILURE, error=error)
