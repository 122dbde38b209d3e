"""Checks shared by every endpoint that accepts a document upload."""

from __future__ import annotations

from typing import Optional

from .exceptions import MissingFile, UnsupportedType


def check_upload(data: Optional[bytes], mime_type: Optional[str], expected_mime_type: str) -> bytes:
    """Return ``data`` if it is a non-empty upload of the expected type.

    The file is checked before its type, so an empty upload of the wrong
    type reports MissingFile.
    """
    if not data:
        raise MissingFile()
    if mime_type != expected_mime_type:
        raise UnsupportedType(details={"received": mime_type, "expected": expected_mime_type})
    return data
