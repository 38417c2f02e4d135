from __future__ import annotations

from typing import Any, Dict


class ErrorCodes:
    INVALID_PROJECT_ROOT = "INVALID_PROJECT_ROOT"
    SRC_DIR_NOT_FOUND = "SRC_DIR_NOT_FOUND"
    FILE_READ_ERROR = "FILE_READ_ERROR"
    FILE_WRITE_ERROR = "FILE_WRITE_ERROR"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    DIRECTORY_SCAN_ERROR = "DIRECTORY_SCAN_ERROR"
    INVALID_FILE_CONTENT = "INVALID_FILE_CONTENT"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class CleanupError(Exception):
    """Cleanup failure with a stable code and a details payload (path, original OS error)."""

    def __init__(self, message: str, code: str, details: Dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_record(self) -> Dict[str, Any]:
        return error_record(self.code, self.message, self.details)


def error_record(code: str, message: str, details: Dict[str, Any] | None = None) -> Dict[str, Any]:
    return {"code": code, "message": message, "details": dict(details or {})}
