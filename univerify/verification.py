"""Verification, the holder side. Read-only."""

from __future__ import annotations

import logging
from typing import Optional

from .digest import DEFAULT_ALGORITHM, compute_digest
from .models import VerificationResult
from .store import RecordStore
from .uploads import check_upload

logger = logging.getLogger(__name__)


class VerificationService:
    def __init__(
        self,
        store: RecordStore,
        expected_mime_type: str = "application/pdf",
        algorithm: str = DEFAULT_ALGORITHM,
    ):
        self.store = store
        self.expected_mime_type = expected_mime_type
        self.algorithm = algorithm

    def verify(self, data: Optional[bytes], mime_type: Optional[str]) -> VerificationResult:
        """Report whether ``data`` matches a registered record.

        Only the public metadata of a match is returned; the record id
        and archive reference stay internal.
        """
        data = check_upload(data, mime_type, self.expected_mime_type)
        digest = compute_digest(data, self.algorithm)

        record = self.store.find_by_digest(digest)
        if record is None:
            logger.info("Verification miss for digest %s", digest)
            return VerificationResult(matched=False, digest=digest)

        logger.info("Verification match for digest %s", digest)
        return VerificationResult(matched=True, digest=digest, record=record.public())
