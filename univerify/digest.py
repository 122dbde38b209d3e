"""
Content digests: the identity of a registered document.

Two documents are "the same" if and only if their digests are equal.
SHA-256 is the default. MD5 remains selectable for snapshots written by
the legacy deployment, but it is NOT collision resistant and must not be
relied on where authenticity matters.
"""

from __future__ import annotations

import hashlib

DEFAULT_ALGORITHM = "sha256"

_HEX = frozenset("0123456789abcdef")

# Algorithm name → hex digest length
SUPPORTED_ALGORITHMS: dict[str, int] = {
    "sha256": 64,
    "md5": 32,
}


def check_algorithm(algorithm: str) -> str:
    """Normalise an algorithm name, raising ValueError if unsupported."""
    name = algorithm.strip().lower()
    if name not in SUPPORTED_ALGORITHMS:
        supported = ", ".join(sorted(SUPPORTED_ALGORITHMS))
        raise ValueError(f"Unsupported digest algorithm '{algorithm}' (expected one of: {supported})")
    return name


def compute_digest(data: bytes, algorithm: str = DEFAULT_ALGORITHM) -> str:
    """Return the lowercase hex digest of ``data``. Empty input is valid."""
    return hashlib.new(check_algorithm(algorithm), data).hexdigest()


def digest_length(algorithm: str = DEFAULT_ALGORITHM) -> int:
    return SUPPORTED_ALGORITHMS[check_algorithm(algorithm)]


def is_well_formed(digest: str, algorithm: str = DEFAULT_ALGORITHM) -> bool:
    """True if ``digest`` is lowercase hex of the right length for ``algorithm``."""
    return len(digest) == digest_length(algorithm) and all(c in _HEX for c in digest)
