"""Pytest configuration — ensures the project root is importable and storage is isolated."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent))

from univerify.archive import BlobArchive  # noqa: E402
from univerify.auth import SharedSecretAuthorizer  # noqa: E402
from univerify.config import Settings  # noqa: E402
from univerify.registration import RegistrationService  # noqa: E402
from univerify.store import JsonRecordStore  # noqa: E402
from univerify.verification import VerificationService  # noqa: E402

SECRET = "s3cret-token"
PDF = "application/pdf"


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings pointing every write at a per-test temp directory."""
    return Settings(
        admin_token=SECRET,
        data_file=tmp_path / "data" / "certificates.json",
        uploads_dir=tmp_path / "uploads",
    )


@pytest.fixture
def store(settings: Settings) -> JsonRecordStore:
    return JsonRecordStore(settings.data_file)


@pytest.fixture
def archive(settings: Settings) -> BlobArchive:
    return BlobArchive(settings.uploads_dir)


@pytest.fixture
def registration(store: JsonRecordStore, archive: BlobArchive) -> RegistrationService:
    return RegistrationService(store, archive, SharedSecretAuthorizer(SECRET))


@pytest.fixture
def verification(store: JsonRecordStore) -> VerificationService:
    return VerificationService(store)
