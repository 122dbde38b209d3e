"""
Blob archive: raw uploaded bytes kept for audit.

Blobs are named by a random identifier, not by content: deduplication
happens one level up, by digest. There is deliberately no HTTP read or
delete surface.
"""

from __future__ import annotations

import logging
import secrets
from pathlib import Path

from .store import atomic_write_bytes

logger = logging.getLogger(__name__)

_ID_BYTES = 8  # 16 hex chars


class BlobArchive:
    def __init__(self, root: str | Path, suffix: str = ".pdf"):
        self.root = Path(root)
        self.suffix = suffix

    def save(self, data: bytes) -> str:
        """Persist ``data`` under a fresh identifier and return its reference."""
        self.root.mkdir(parents=True, exist_ok=True)
        while True:
            ref = f"{secrets.token_hex(_ID_BYTES)}{self.suffix}"
            path = self.root / ref
            if not path.exists():
                break
        atomic_write_bytes(path, data)
        logger.info("Archived %d bytes as %s", len(data), ref)
        return ref

    def path_for(self, ref: str) -> Path:
        """Resolve a reference to its file path inside the archive root."""
        root = self.root.resolve()
        path = (root / ref).resolve()
        if path.parent != root:
            raise ValueError(f"Archive reference escapes archive root: {ref!r}")
        return path
