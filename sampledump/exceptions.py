"""Custom exception hierarchy for the sample data dump tool."""

from __future__ import annotations

from enum import Enum


class SampleDumpError(Exception):
    """Base exception for all sample dump errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(SampleDumpError):
    """Raised when settings or table configurations are missing or invalid."""
    pass


class ErrorKind(str, Enum):
    STATEMENT = "STATEMENT"
    CONNECTIVITY = "CONNECTIVITY"


class TransportError(SampleDumpError):
    """Raised by the execution transport.

    ``kind`` tells a rejected statement (bad SQL, unknown column) apart from a
    lost or refused connection.
    """

    def __init__(self, message: str, kind: ErrorKind, details: dict | None = None):
        super().__init__(message, details)
        self.kind = kind

    @property
    def is_statement_error(self) -> bool:
        return self.kind is ErrorKind.STATEMENT


class SafetyViolationError(SampleDumpError):
    """Raised when a dump load is attempted in a production environment."""
    pass


class StorageError(SampleDumpError):
    """Base exception for storage-related errors."""
    pass


class LocalStorageError(StorageError):
    """Raised when local file operations fail."""
    pass
