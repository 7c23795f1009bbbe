"""
Error types for the Viade POD layer.

This module defines all exception types raised by the package:
- PodError: Base exception
- StoreError: Fetching or persisting a POD resource failed
- StoreWriteError: Persisting a resource was rejected
- NotFoundError: The POD has no such resource
- PodConnectionError: The POD could not be reached
- ValidationError: A JSON-LD document has an unusable shape

Invariants:
    - All errors inherit from PodError
    - Errors include context for debugging
    - Store errors are raised as-is, never retried here
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class PodError(Exception):
    """Base exception for all Viade POD errors.

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "POD_ERROR"
        self.details = details or {}


class StoreError(PodError):
    """Reading or writing a POD resource failed.

    Raised when:
    - The POD answers with an error status
    - The response body cannot be decoded
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            code=code or "STORE_ERROR",
            details={"url": url, "status_code": status_code},
        )
        self.url = url
        self.status_code = status_code


class StoreWriteError(StoreError):
    """The POD refused to persist a resource."""

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message, url=url, status_code=status_code, code="STORE_WRITE_ERROR")


class NotFoundError(StoreError):
    """Resource not found on the POD."""

    def __init__(self, message: str, url: str) -> None:
        super().__init__(message, url=url, status_code=404, code="NOT_FOUND")


class PodConnectionError(StoreError):
    """Failed to reach the POD.

    Raised when:
    - Host is unreachable
    - Request times out
    """

    def __init__(self, message: str, url: Optional[str] = None) -> None:
        super().__init__(message, url=url, code="CONNECTION_ERROR")


class ValidationError(PodError):
    """A document does not have the expected JSON-LD shape.

    Attributes:
        field_name: Offending key, if known
    """

    def __init__(
        self,
        message: str,
        field_name: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            code="VALIDATION_ERROR",
            details={"field": field_name},
        )
        self.field_name = field_name
