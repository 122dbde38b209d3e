"""
Record store: the persistent digest → record mapping.

The JSON implementation keeps every record in one snapshot document:

    {"certificates": [<newest record>, ..., <oldest record>]}

Every call re-reads the file; nothing is cached between requests.
Writes rewrite the whole document through a temp file + os.replace, and
are serialized by a per-store lock so that within one process at most
one record exists per digest.
"""

from __future__ import annotations

import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Protocol

from .digest import DEFAULT_ALGORITHM, check_algorithm, is_well_formed
from .models import Record, StoreSnapshot

logger = logging.getLogger(__name__)


class RecordStore(Protocol):
    """What the services need from storage."""

    def load_all(self) -> list[Record]: ...

    def find_by_digest(self, digest: str) -> Record | None: ...

    def insert(self, record: Record) -> None: ...

    def insert_if_absent(self, record: Record) -> tuple[Record, bool]: ...


def atomic_write_bytes(path: Path, data: bytes) -> None:
    """Write ``data`` to ``path`` via a sibling temp file and os.replace."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class JsonRecordStore:
    """Record store backed by a single JSON snapshot file.

    Usage:
        store = JsonRecordStore("data/certificates.json")
        existing = store.find_by_digest(digest)
        record, created = store.insert_if_absent(new_record)
    """

    def __init__(self, path: str | Path, algorithm: str = DEFAULT_ALGORITHM):
        self.path = Path(path)
        self.algorithm = check_algorithm(algorithm)
        self._write_lock = threading.Lock()

    # ─── Reads ──────────────────────────────────────────────────────

    def load_all(self) -> list[Record]:
        """Return all records, newest first.

        Never raises: a missing file means "no data yet", and a corrupt
        file is treated the same way (logged, so it is not silent in ops).
        """
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return []
        except OSError as e:
            logger.warning("Cannot read record store %s (%s); treating as empty", self.path, e)
            return []

        try:
            snapshot = StoreSnapshot.model_validate_json(raw)
        except ValueError as e:
            logger.warning("Record store %s is corrupt (%s); treating as empty", self.path, e)
            return []

        foreign = sum(1 for r in snapshot.certificates if not is_well_formed(r.digest, self.algorithm))
        if foreign:
            # e.g. a snapshot written under another DIGEST_ALGORITHM
            logger.warning(
                "%d record(s) in %s are not %s digests and cannot match",
                foreign,
                self.path,
                self.algorithm,
            )
        return snapshot.certificates

    def find_by_digest(self, digest: str) -> Record | None:
        """Linear scan; the first (newest) match wins."""
        for record in self.load_all():
            if record.digest == digest:
                return record
        return None

    def count(self) -> int:
        return len(self.load_all())

    # ─── Writes ─────────────────────────────────────────────────────

    def insert(self, record: Record) -> None:
        """Prepend ``record`` and rewrite the snapshot. Does not dedup."""
        self._check_digest(record)
        with self._write_lock:
            self._write([record, *self.load_all()])

    def insert_if_absent(self, record: Record) -> tuple[Record, bool]:
        """Insert unless a record with the same digest exists.

        Returns (stored_record, created). The check and the write happen
        under the store lock, so two racing callers cannot both create.
        """
        self._check_digest(record)
        with self._write_lock:
            records = self.load_all()
            for existing in records:
                if existing.digest == record.digest:
                    return existing, False
            self._write([record, *records])
            return record, True

    def _check_digest(self, record: Record) -> None:
        if not is_well_formed(record.digest, self.algorithm):
            raise ValueError(
                f"Record {record.id} has digest {record.digest!r}, not a {self.algorithm} hex digest"
            )

    def _write(self, records: list[Record]) -> None:
        snapshot = StoreSnapshot(certificates=records)
        payload = snapshot.model_dump_json(by_alias=True, indent=2)
        atomic_write_bytes(self.path, payload.encode("utf-8"))
        logger.debug("Wrote %d record(s) to %s", len(records), self.path)
