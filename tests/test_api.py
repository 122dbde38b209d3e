"""
FastAPI endpoint tests for the UniVerify API.

Uses httpx + FastAPI TestClient — no real server needed. Each test gets an
app wired to its own temp directories.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from api import create_app
from conftest import PDF, SECRET
from univerify.config import Settings
from univerify.digest import compute_digest

DOC_X = b"%PDF-1.7\n% Alice, BSc, 2024-01-01\n%%EOF\n"
DOC_Y = b"%PDF-1.7\n% Alice, BSc, 2024-01-02\n%%EOF\n"

FORM = {
    "token": SECRET,
    "holderName": "Alice",
    "credentialType": "BSc",
    "issueDate": "2024-01-01",
}


@pytest.fixture
def client(settings: Settings) -> TestClient:
    return TestClient(create_app(settings))


def _upload(client: TestClient, data: bytes = DOC_X, mime: str = PDF, **form: str):
    return client.post(
        "/api/university/upload",
        data={**FORM, **form},
        files={"pdf": ("cert.pdf", data, mime)},
    )


def _verify(client: TestClient, data: bytes = DOC_X, mime: str = PDF):
    return client.post("/api/verify", files={"pdf": ("cert.pdf", data, mime)})


class TestHealthEndpoint:
    def test_health_returns_200(self, client: TestClient) -> None:
        assert client.get("/health").status_code == 200

    def test_health_counts_records(self, client: TestClient) -> None:
        assert client.get("/health").json()["records"] == 0
        _upload(client)
        data = client.get("/health").json()
        assert data["status"] == "healthy"
        assert data["version"] == "1.0.0"
        assert data["records"] == 1


class TestUploadEndpoint:
    def test_creates_certificate(self, client: TestClient) -> None:
        resp = _upload(client)
        assert resp.status_code == 200
        data = resp.json()
        assert data["ok"] is True
        assert data["status"] == "created"
        assert data["digest"] == compute_digest(DOC_X)
        assert data["metadataDiffers"] is False
        cert = data["certificate"]
        assert cert["holderName"] == "Alice"
        assert cert["credentialType"] == "BSc"
        assert cert["issueDate"] == "2024-01-01"
        assert cert["digest"] == data["digest"]
        assert cert["archiveRef"].endswith(".pdf")
        assert cert["id"] and cert["createdAt"]

    def test_blob_is_archived(self, client: TestClient, settings: Settings) -> None:
        ref = _upload(client).json()["certificate"]["archiveRef"]
        assert (settings.uploads_dir / ref).read_bytes() == DOC_X

    def test_duplicate_returns_existing(self, client: TestClient) -> None:
        first = _upload(client).json()
        second = _upload(client, holderName="Bob").json()
        assert second["status"] == "duplicate"
        assert second["metadataDiffers"] is True
        assert second["certificate"] == first["certificate"]
        assert "already exists" in second["message"]
        assert client.get("/health").json()["records"] == 1

    def test_wrong_token_401(self, client: TestClient, settings: Settings) -> None:
        resp = _upload(client, token="wrong")
        assert resp.status_code == 401
        assert resp.json() == {"ok": False, "code": "UNAUTHORIZED", "message": "Unauthorized (token)"}
        assert not settings.data_file.exists()
        assert not settings.uploads_dir.exists()

    def test_missing_token_401(self, client: TestClient) -> None:
        resp = client.post(
            "/api/university/upload",
            data={k: v for k, v in FORM.items() if k != "token"},
            files={"pdf": ("cert.pdf", DOC_X, PDF)},
        )
        assert resp.status_code == 401

    def test_token_checked_before_size(self, settings: Settings) -> None:
        client = TestClient(create_app(replace(settings, max_upload_bytes=4)))
        assert _upload(client, token="wrong").status_code == 401

    def test_missing_file_400(self, client: TestClient) -> None:
        resp = client.post("/api/university/upload", data=FORM)
        assert resp.status_code == 400
        assert resp.json()["code"] == "MISSING_FILE"

    def test_empty_file_400(self, client: TestClient) -> None:
        resp = _upload(client, data=b"")
        assert resp.status_code == 400
        assert resp.json()["code"] == "MISSING_FILE"

    def test_non_pdf_400(self, client: TestClient) -> None:
        resp = _upload(client, mime="text/plain")
        assert resp.status_code == 400
        assert resp.json()["message"] == "Only PDF is allowed"

    def test_blank_field_400(self, client: TestClient, settings: Settings) -> None:
        resp = _upload(client, credentialType="  ")
        assert resp.status_code == 400
        body = resp.json()
        assert body["code"] == "MISSING_FIELDS"
        assert body["details"]["fields"] == ["credentialType"]
        assert not settings.data_file.exists()

    def test_too_large_413(self, settings: Settings) -> None:
        client = TestClient(create_app(replace(settings, max_upload_bytes=8)))
        resp = _upload(client)
        assert resp.status_code == 413
        assert resp.json()["code"] == "FILE_TOO_LARGE"

    def test_storage_failure_500_is_generic(self, tmp_path: Path, settings: Settings) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("x", encoding="utf-8")
        client = TestClient(create_app(replace(settings, data_file=blocker / "certificates.json")))
        resp = _upload(client)
        assert resp.status_code == 500
        assert resp.json() == {"ok": False, "code": "INTERNAL_ERROR", "message": "Server error"}


class TestVerifyEndpoint:
    def test_match(self, client: TestClient) -> None:
        created = _upload(client).json()
        resp = _verify(client)
        assert resp.status_code == 200
        data = resp.json()
        assert data["valid"] is True
        assert data["digest"] == created["digest"]
        assert data["certificate"] == {
            "holderName": "Alice",
            "credentialType": "BSc",
            "issueDate": "2024-01-01",
            "createdAt": created["certificate"]["createdAt"],
        }

    def test_no_match_is_still_200(self, client: TestClient) -> None:
        _upload(client)
        resp = _verify(client, DOC_Y)
        assert resp.status_code == 200
        data = resp.json()
        assert data["ok"] is True
        assert data["valid"] is False
        assert data["certificate"] is None
        assert data["message"] == "No match found"

    def test_no_token_needed(self, client: TestClient) -> None:
        assert _verify(client).status_code == 200

    def test_missing_file_400(self, client: TestClient) -> None:
        resp = client.post("/api/verify")
        assert resp.status_code == 400
        assert resp.json()["code"] == "MISSING_FILE"

    def test_non_pdf_400(self, client: TestClient) -> None:
        resp = _verify(client, mime="image/png")
        assert resp.status_code == 400
        assert resp.json()["code"] == "UNSUPPORTED_TYPE"


def test_uninitialised_app_503() -> None:
    """Without settings and without running the lifespan, nothing is wired."""
    client = TestClient(create_app())
    assert client.get("/health").status_code == 503
