"""
Custom exceptions for the contribution archiver.
"""

from typing import Optional


class ArchiveError(Exception):
    """Base exception for all archiver errors."""
    pass


class ConfigError(ArchiveError):
    """
    Error in archiver configuration.

    Raised when:
    - The session cookie or user id is not set
    - The user id is not an integer
    - A configuration file is missing or unreadable
    """
    pass


class RequestFailed(ArchiveError):
    """
    A remote API call did not produce a usable response.

    Raised when:
    - The transport fails (connection error, timeout); status_code is 0
    - The service answers with a non-2xx status
    - The response body does not have the expected top-level shape
    """

    def __init__(self, operation: str, status_code: int = 0, message: Optional[str] = None):
        self.operation = operation
        self.status_code = status_code
        self.message = message or f"HTTP {status_code}"
        super().__init__(f"{operation} failed: {self.message}")


class StorageError(ArchiveError):
    """
    Error reading or writing the archive directory tree.

    Wraps the underlying OSError with the path that was being touched.
    """

    def __init__(self, path, message: str):
        self.path = path
        super().__init__(f"{message}: {path}")
