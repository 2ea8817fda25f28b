"""Structured error handling — pipeline exceptions, categories, and tool error model."""

from __future__ import annotations

from enum import Enum

import httpx
from pydantic import BaseModel


class ErrorCategory(str, Enum):
    """Categories of errors for diagnostics."""

    CONTENT_MISSING = "CONTENT_MISSING"
    CONTENT_TOO_LONG = "CONTENT_TOO_LONG"
    STORAGE_PATH_INVALID = "STORAGE_PATH_INVALID"
    STORAGE_DOWNLOAD_FAILED = "STORAGE_DOWNLOAD_FAILED"
    EXTRACTION_FAILED = "EXTRACTION_FAILED"
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    FILE_UNSUPPORTED = "FILE_UNSUPPORTED"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    API_KEY_MISSING = "API_KEY_MISSING"
    API_PERMISSION_DENIED = "API_PERMISSION_DENIED"
    API_QUOTA_EXCEEDED = "API_QUOTA_EXCEEDED"
    API_INVALID_ARGUMENT = "API_INVALID_ARGUMENT"
    API_ERROR = "API_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    INVALID_INPUT = "INVALID_INPUT"
    UNKNOWN = "UNKNOWN"


class AtlasError(Exception):
    """Base class for fatal pipeline errors.

    The message is user-safe and is surfaced verbatim at the tool boundary.
    """

    category: ErrorCategory = ErrorCategory.UNKNOWN

    def __init__(self, message: str, *, category: ErrorCategory | None = None) -> None:
        super().__init__(message)
        if category is not None:
            self.category = category


class ExtractionError(AtlasError):
    """A binary document yielded no usable text."""

    category = ErrorCategory.EXTRACTION_FAILED


class ResolutionError(AtlasError):
    """No usable input, input too long, or download/extraction failure."""

    category = ErrorCategory.CONTENT_MISSING


class CompletionError(AtlasError):
    """Missing credential or non-success response from the completion endpoint."""

    category = ErrorCategory.API_ERROR

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, category=category)
        self.status_code = status_code


class StorageError(AtlasError):
    """The object store is unconfigured or rejected a request."""

    category = ErrorCategory.STORAGE_DOWNLOAD_FAILED


class UploadRejected(AtlasError):
    """An upload failed the size or type checks."""

    category = ErrorCategory.FILE_UNSUPPORTED


class ToolError(BaseModel):
    """Structured error returned from any tool."""

    error: str
    category: str
    hint: str
    retryable: bool = False
    retry_after_seconds: int | None = None


_HINTS: dict[ErrorCategory, str] = {
    ErrorCategory.CONTENT_MISSING: "Paste study material or select an uploaded file",
    ErrorCategory.CONTENT_TOO_LONG: "Shorten the pasted text or upload it as a file",
    ErrorCategory.STORAGE_PATH_INVALID: "Pass the public URL returned by upload_file, or the bucket-relative path",
    ErrorCategory.STORAGE_DOWNLOAD_FAILED: "The file could not be fetched from storage — re-upload it or check SUPABASE_URL",
    ErrorCategory.EXTRACTION_FAILED: "Couldn't read the file — it may be scanned, empty, or password protected",
    ErrorCategory.FILE_NOT_FOUND: "File not found — check the path",
    ErrorCategory.FILE_UNSUPPORTED: "Unsupported file type — upload PDF, TXT, MD, or DOCX",
    ErrorCategory.FILE_TOO_LARGE: "File too large — maximum size is 10 MB",
    ErrorCategory.API_KEY_MISSING: "Set GROQ_API_KEY in the environment or ~/.config/atlas-study/.env",
    ErrorCategory.API_PERMISSION_DENIED: "API key rejected — check GROQ_API_KEY",
    ErrorCategory.API_QUOTA_EXCEEDED: "Rate limit hit — wait a minute and try again",
    ErrorCategory.API_INVALID_ARGUMENT: "Bad request — check input format",
    ErrorCategory.API_ERROR: "Completion endpoint returned an error",
    ErrorCategory.NETWORK_ERROR: "Request timed out or could not connect — try again or check connectivity",
    ErrorCategory.INVALID_INPUT: "Invalid input parameter",
}


def _category_for_status(status_code: int) -> ErrorCategory:
    """Map an upstream HTTP status code to an ErrorCategory."""
    if status_code in (401, 403):
        return ErrorCategory.API_PERMISSION_DENIED
    if status_code == 429:
        return ErrorCategory.API_QUOTA_EXCEEDED
    if status_code == 400:
        return ErrorCategory.API_INVALID_ARGUMENT
    return ErrorCategory.API_ERROR


def categorize_error(error: Exception) -> tuple[ErrorCategory, str]:
    """Map an exception to an ErrorCategory + human-readable hint."""
    if isinstance(error, CompletionError) and error.status_code is not None:
        cat = _category_for_status(error.status_code)
        return cat, _HINTS[cat]
    if isinstance(error, AtlasError):
        return error.category, _HINTS.get(error.category, str(error))
    if isinstance(error, (TimeoutError, httpx.TimeoutException, httpx.NetworkError)):
        return ErrorCategory.NETWORK_ERROR, _HINTS[ErrorCategory.NETWORK_ERROR]
    if isinstance(error, FileNotFoundError):
        return ErrorCategory.FILE_NOT_FOUND, _HINTS[ErrorCategory.FILE_NOT_FOUND]
    if isinstance(error, (ValueError, PermissionError)):
        return ErrorCategory.INVALID_INPUT, str(error)

    s = str(error).lower()
    if "timeout" in s or "timed out" in s:
        return ErrorCategory.NETWORK_ERROR, _HINTS[ErrorCategory.NETWORK_ERROR]

    return (ErrorCategory.UNKNOWN, str(error))


def make_tool_error(error: Exception) -> dict:
    """Create a serialisable ToolError dict from an exception."""
    cat, hint = categorize_error(error)
    retryable = cat in {
        ErrorCategory.API_QUOTA_EXCEEDED,
        ErrorCategory.NETWORK_ERROR,
    }
    return ToolError(
        error=str(error),
        category=cat.value,
        hint=hint,
        retryable=retryable,
        retry_after_seconds=60 if cat == ErrorCategory.API_QUOTA_EXCEEDED else None,
    ).model_dump(mode="json")
