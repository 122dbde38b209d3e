"""
Pydantic models for registered credentials.

Python attributes are snake_case; the snapshot file and the HTTP API use
camelCase aliases. Either spelling is accepted on input, and so are the
keys written by the legacy deployment (md5, studentName, degree,
storedFile). Records are always written back in the current shape.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ─── Records ────────────────────────────────────────────────────────


class PublicRecord(BaseModel):
    """The fields a verifier is allowed to see."""

    model_config = _CAMEL

    holder_name: str
    credential_type: str
    issue_date: str  # Free-text calendar date, stored as submitted
    created_at: datetime


class Record(BaseModel):
    """One registered document. At most one record exists per digest."""

    model_config = _CAMEL

    id: str
    digest: str = Field(validation_alias=AliasChoices("digest", "md5"), serialization_alias="digest")
    holder_name: str = Field(
        validation_alias=AliasChoices("holderName", "holder_name", "studentName"),
        serialization_alias="holderName",
    )
    credential_type: str = Field(
        validation_alias=AliasChoices("credentialType", "credential_type", "degree"),
        serialization_alias="credentialType",
    )
    issue_date: str
    # Reference into the blob archive
    archive_ref: str = Field(
        validation_alias=AliasChoices("archiveRef", "archive_ref", "storedFile"),
        serialization_alias="archiveRef",
    )
    created_at: datetime

    def public(self) -> PublicRecord:
        return PublicRecord(
            holder_name=self.holder_name,
            credential_type=self.credential_type,
            issue_date=self.issue_date,
            created_at=self.created_at,
        )

    def same_metadata(self, holder_name: str, credential_type: str, issue_date: str) -> bool:
        return (self.holder_name, self.credential_type, self.issue_date) == (
            holder_name,
            credential_type,
            issue_date,
        )


class StoreSnapshot(BaseModel):
    """The whole record store as persisted on disk, newest first."""

    certificates: list[Record] = Field(default_factory=list)


# ─── Service Results ────────────────────────────────────────────────


class RegistrationStatus(str, Enum):
    CREATED = "created"
    DUPLICATE = "duplicate"


class RegistrationResult(BaseModel):
    model_config = _CAMEL

    status: RegistrationStatus
    digest: str
    record: Record
    metadata_differs: bool = False  # Duplicate submitted with other metadata

    @property
    def created(self) -> bool:
        return self.status == RegistrationStatus.CREATED


class VerificationResult(BaseModel):
    """Outcome of a verification. Never carries id or archive_ref."""

    model_config = _CAMEL

    matched: bool
    digest: str
    record: Optional[PublicRecord] = None
