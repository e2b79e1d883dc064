"""
Custom exceptions for the upload action.

Every failure the action knows how to report derives from
UploaderBaseError, so the entry point can catch them at a single boundary.
"""

from typing import Optional


class UploaderBaseError(Exception):
    """Base exception for all upload action errors."""

    pass


class ConfigurationError(UploaderBaseError):
    """
    Raised when the action inputs cannot be resolved.

    This exception is used when:
    - A required input is missing
    - An input value cannot be converted to its declared type
    - An input value is out of range
    """

    pass


class DirectoryChangeError(UploaderBaseError):
    """Raised when the requested working directory is not usable."""

    pass


class UploadError(UploaderBaseError):
    """
    Raised when the storage provider rejects or fails an upload.

    Covers authentication failures, quota errors, network problems and
    local read errors on the file being sent. The original exception is
    kept in ``cause``.
    """

    def __init__(
        self,
        message: str,
        destination: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.destination = destination
        self.cause = cause
