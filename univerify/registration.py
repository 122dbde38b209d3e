"""
Registration, the issuer side.

Flow:
  token ─▶ authorize ─▶ file present? ─▶ type ok? ─▶ fields present?
                                                          │
                                                     digest(bytes)
                                                          │
                                  ┌───── found ◀── find_by_digest ──▶ absent ─────┐
                                  ▼                                               ▼
                        return existing record                         archive.save(bytes)
                        (no writes, "duplicate")                      store.insert_if_absent
                                                                           ("created")

Each precondition produces its own error, checked in the order above, and
no precondition failure ever touches the archive or the store.
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timezone
from typing import Callable, Optional

from .archive import BlobArchive
from .auth import Authorizer
from .digest import DEFAULT_ALGORITHM, compute_digest
from .exceptions import InternalError, MissingFields
from .models import Record, RegistrationResult, RegistrationStatus
from .store import RecordStore
from .uploads import check_upload

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_record_id() -> str:
    return secrets.token_hex(8)


class RegistrationService:
    """Validates an upload and records it, once per distinct content.

    Usage:
        service = RegistrationService(store, archive, SharedSecretAuthorizer(secret))
        result = service.register(token, pdf_bytes, "application/pdf", "Alice", "BSc", "2024-01-01")
        result.status  # RegistrationStatus.CREATED or DUPLICATE
    """

    def __init__(
        self,
        store: RecordStore,
        archive: BlobArchive,
        authorizer: Authorizer,
        expected_mime_type: str = "application/pdf",
        algorithm: str = DEFAULT_ALGORITHM,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.archive = archive
        self.authorizer = authorizer
        self.expected_mime_type = expected_mime_type
        self.algorithm = algorithm
        self.clock = clock

    def register(
        self,
        token: Optional[str],
        data: Optional[bytes],
        mime_type: Optional[str],
        holder_name: Optional[str],
        credential_type: Optional[str],
        issue_date: Optional[str],
    ) -> RegistrationResult:
        # ── Preconditions (order matters) ───────────────────────────
        self.authorizer.authorize(token)
        data = check_upload(data, mime_type, self.expected_mime_type)

        fields = {
            "holderName": (holder_name or "").strip(),
            "credentialType": (credential_type or "").strip(),
            "issueDate": (issue_date or "").strip(),
        }
        missing = [name for name, value in fields.items() if not value]
        if missing:
            raise MissingFields(missing)

        holder_name = fields["holderName"]
        credential_type = fields["credentialType"]
        issue_date = fields["issueDate"]

        # ── Dedup by content ────────────────────────────────────────
        digest = compute_digest(data, self.algorithm)
        existing = self.store.find_by_digest(digest)
        if existing is not None:
            return self._duplicate(existing, digest, holder_name, credential_type, issue_date)

        # ── Persist blob, then record ───────────────────────────────
        try:
            archive_ref = self.archive.save(data)
            record = Record(
                id=_new_record_id(),
                digest=digest,
                holder_name=holder_name,
                credential_type=credential_type,
                issue_date=issue_date,
                archive_ref=archive_ref,
                created_at=self.clock(),
            )
            stored, created = self.store.insert_if_absent(record)
        except OSError:
            logger.exception("Storage failure while registering digest %s", digest)
            raise InternalError() from None

        if not created:
            # Lost a race with a concurrent registration; the blob stays orphaned
            logger.info("Digest %s registered concurrently; archived blob %s unreferenced", digest, archive_ref)
            return self._duplicate(stored, digest, holder_name, credential_type, issue_date)

        logger.info("Registered record %s (digest %s)", stored.id, digest)
        return RegistrationResult(status=RegistrationStatus.CREATED, digest=digest, record=stored)

    def _duplicate(
        self,
        existing: Record,
        digest: str,
        holder_name: str,
        credential_type: str,
        issue_date: str,
    ) -> RegistrationResult:
        differs = not existing.same_metadata(holder_name, credential_type, issue_date)
        if differs:
            logger.warning(
                "Digest %s already registered as record %s with different metadata; keeping the original",
                digest,
                existing.id,
            )
        else:
            logger.info("Digest %s already registered as record %s", digest, existing.id)
        return RegistrationResult(
            status=RegistrationStatus.DUPLICATE,
            digest=digest,
            record=existing,
            metadata_differs=differs,
        )
