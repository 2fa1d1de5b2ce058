"""
Error kinds for tagversion.

Every failure surfaced by the library is a TagVersionError carrying an
ErrorKind discriminant, so callers can switch on `err.kind` or use the
is_* predicates below:

- INVALID_CONFIG: construction-time misconfiguration
- REFERENCE_NOT_FOUND: a ref/revision does not resolve, or HEAD is untagged
- REPOSITORY_NOT_FOUND: the remote repository does not exist
- FILE_NOT_FOUND / FOLDER_NOT_FOUND: path missing at the resolved revision
- EXECUTION_FAILED: ambiguous tag state or a failed git invocation
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Semantic error kinds."""
    INVALID_CONFIG = "invalid_config"
    REFERENCE_NOT_FOUND = "reference_not_found"
    REPOSITORY_NOT_FOUND = "repository_not_found"
    FILE_NOT_FOUND = "file_not_found"
    FOLDER_NOT_FOUND = "folder_not_found"
    EXECUTION_FAILED = "execution_failed"


class TagVersionError(Exception):
    """Base class for all tagversion errors."""
    kind: ErrorKind = ErrorKind.EXECUTION_FAILED

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        if self.message:
            return f"{self.kind.value}: {self.message}"
        return self.kind.value

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            'error': self.message,
            'type': type(self).__name__,
            'kind': self.kind.value,
        }


class InvalidConfigError(TagVersionError):
    kind = ErrorKind.INVALID_CONFIG


class ReferenceNotFoundError(TagVersionError):
    kind = ErrorKind.REFERENCE_NOT_FOUND


class RepositoryNotFoundError(TagVersionError):
    kind = ErrorKind.REPOSITORY_NOT_FOUND


class FileNotFoundInRevisionError(TagVersionError):
    kind = ErrorKind.FILE_NOT_FOUND


class FolderNotFoundError(TagVersionError):
    kind = ErrorKind.FOLDER_NOT_FOUND


class ExecutionFailedError(TagVersionError):
    """
    Execution cannot continue.

    Raised for ambiguous version tags and for git invocations that fail in
    a way no other kind describes. Never matched to trigger a fallback.
    """
    kind = ErrorKind.EXECUTION_FAILED


def error_kind(err: Optional[BaseException]) -> Optional[ErrorKind]:
    """
    Find the ErrorKind of an exception.

    Follows explicit `raise ... from` chains so wrapped errors still match.
    """
    seen = set()
    while err is not None and id(err) not in seen:
        if isinstance(err, TagVersionError):
            return err.kind
        seen.add(id(err))
        err = err.__cause__
    return None


def is_invalid_config(err: Optional[BaseException]) -> bool:
    return error_kind(err) is ErrorKind.INVALID_CONFIG


def is_reference_not_found(err: Optional[BaseException]) -> bool:
    return error_kind(err) is ErrorKind.REFERENCE_NOT_FOUND


def is_repository_not_found(err: Optional[BaseException]) -> bool:
    return error_kind(err) is ErrorKind.REPOSITORY_NOT_FOUND


def is_file_not_found(err: Optional[BaseException]) -> bool:
    return error_kind(err) is ErrorKind.FILE_NOT_FOUND


def is_folder_not_found(err: Optional[BaseException]) -> bool:
    return error_kind(err) is ErrorKind.FOLDER_NOT_FOUND


def is_execution_failed(err: Optional[BaseException]) -> bool:
    return error_kind(err) is ErrorKind.EXECUTION_FAILED
