"""Pipeline error kinds.

Every stage raises one of these; the orchestrator turns them into a failed
``GenerationResult`` instead of letting them reach the caller.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path


class ErrorKind(str, Enum):
    MISSING_INPUT = "missing_input"
    MISSING_CREDENTIAL = "missing_credential"
    REMOTE_FAILURE = "remote_failure"
    EMPTY_RESPONSE = "empty_response"
    COMPILE_FAILURE = "compile_failure"
    FILE_IO_FAILURE = "file_io_failure"
    PERSIST_FAILURE = "persist_failure"
    INTERNAL = "internal"


class TailorError(Exception):
    """Base class for all pipeline failures."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)


class MissingInput(TailorError):
    kind = ErrorKind.MISSING_INPUT


class MissingCredential(TailorError):
    kind = ErrorKind.MISSING_CREDENTIAL

    def __init__(self, detail: str = "API key is not set."):
        super().__init__(detail)


class RemoteFailure(TailorError):
    """Non-success response (or transport error) from the generation service.

    Attributes:
        status_code: HTTP status, or None when no response was received.
        message: Error message taken from the response body.
    """

    kind = ErrorKind.REMOTE_FAILURE

    def __init__(self, status_code: int | None, message: str):
        self.status_code = status_code
        self.message = message
        if status_code is None:
            detail = f"API request failed: {message}"
        else:
            detail = f"API request failed with status {status_code}: {message}"
        super().__init__(detail)


class EmptyResponse(TailorError):
    kind = ErrorKind.EMPTY_RESPONSE

    def __init__(self, detail: str = "No content generated from API."):
        super().__init__(detail)


class CompileFailure(TailorError):
    """LaTeX rendering failed; the rejected source is kept at debug_source_path."""

    kind = ErrorKind.COMPILE_FAILURE

    def __init__(self, detail: str, debug_source_path: Path | None):
        self.debug_source_path = debug_source_path
        message = f"LaTeX compilation failed: {detail}"
        if debug_source_path is not None:
            message += f"\nCheck the .tex file at: {debug_source_path}"
        super().__init__(message)
        self.detail = detail


class FileIOFailure(TailorError):
    kind = ErrorKind.FILE_IO_FAILURE

    def __init__(self, detail: str, debug_source_path: Path | None = None):
        self.debug_source_path = debug_source_path
        super().__init__(detail)


class PersistFailure(TailorError):
    kind = ErrorKind.PERSIST_FAILURE
