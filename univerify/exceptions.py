"""
Exception hierarchy for registration and verification.

Each exception type maps to one category of failure and carries the HTTP
status the API reports it with. Caller errors describe what was wrong;
InternalError never exposes the underlying cause.
"""

from __future__ import annotations


class RegistryError(Exception):
    """Base exception for all registration/verification failures."""

    status_code = 400

    def __init__(self, code: str, message: str, details: dict | None = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)


class Unauthorized(RegistryError):
    """The shared secret is missing or wrong."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized (token)", details: dict | None = None):
        super().__init__("UNAUTHORIZED", message, details)


class MissingFile(RegistryError):
    """No file (or an empty one) was uploaded."""

    def __init__(self, message: str = "PDF file is required", details: dict | None = None):
        super().__init__("MISSING_FILE", message, details)


class UnsupportedType(RegistryError):
    """The upload is not of the expected document type."""

    def __init__(self, message: str = "Only PDF is allowed", details: dict | None = None):
        super().__init__("UNSUPPORTED_TYPE", message, details)


class MissingFields(RegistryError):
    """One or more required metadata fields are empty."""

    def __init__(self, fields: list[str], message: str = "Missing fields"):
        super().__init__("MISSING_FIELDS", message, {"fields": fields})


class FileTooLarge(RegistryError):
    """The upload exceeds the configured size limit."""

    status_code = 413

    def __init__(self, limit: int):
        super().__init__(
            "FILE_TOO_LARGE",
            f"File too large (max {limit} bytes)",
            {"max_bytes": limit},
        )


class InternalError(RegistryError):
    """Storage failed. The cause is logged, never returned to the caller."""

    status_code = 500

    def __init__(self, message: str = "Server error"):
        super().__init__("INTERNAL_ERROR", message)
