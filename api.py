"""
UniVerify — FastAPI Server
===========================

Issuers register credential PDFs; anyone holding a copy can check it
against the registry. Identity is the digest of the exact file bytes.

Endpoints:
    POST /api/university/upload   Register a PDF (shared-secret protected)
    POST /api/verify              Check a PDF against the registry
    GET  /health                  Health check / readiness check

Run:
    python main.py serve                    # Uses HOST / PORT from the environment
    uvicorn api:app --reload                # Dev

Docs:
    http://localhost:3000/docs              # Swagger UI (auto-generated)
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from univerify import __version__
from univerify.archive import BlobArchive
from univerify.auth import SharedSecretAuthorizer
from univerify.config import Settings, configure_logging
from univerify.exceptions import FileTooLarge, RegistryError
from univerify.models import PublicRecord, Record, RegistrationStatus
from univerify.registration import RegistrationService
from univerify.store import JsonRecordStore
from univerify.verification import VerificationService

logger = logging.getLogger(__name__)


# ─── Service Wiring ──────────────────────────────────────────────────


@dataclass
class Services:
    settings: Settings
    store: JsonRecordStore
    registration: RegistrationService
    verification: VerificationService


def build_services(settings: Settings) -> Services:
    store = JsonRecordStore(settings.data_file, settings.digest_algorithm)
    archive = BlobArchive(settings.uploads_dir)
    return Services(
        settings=settings,
        store=store,
        registration=RegistrationService(
            store,
            archive,
            SharedSecretAuthorizer(settings.admin_token),
            expected_mime_type=settings.expected_mime_type,
            algorithm=settings.digest_algorithm,
        ),
        verification=VerificationService(
            store,
            expected_mime_type=settings.expected_mime_type,
            algorithm=settings.digest_algorithm,
        ),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load settings from the environment unless the app was built with some."""
    if getattr(app.state, "services", None) is None:
        settings = Settings.from_env()
        configure_logging(settings.log_level)
        app.state.services = build_services(settings)
        if not settings.admin_token:
            logger.warning("ADMIN_TOKEN is not set; registration is disabled")
    yield


# ─── Response Schemas ────────────────────────────────────────────────


class _Response(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterResponse(_Response):
    ok: bool = True
    status: RegistrationStatus
    message: str
    digest: str
    metadata_differs: bool
    certificate: Record


class VerifyResponse(_Response):
    ok: bool = True
    valid: bool
    digest: str
    message: str
    certificate: Optional[PublicRecord] = None


class HealthResponse(BaseModel):
    status: str
    version: str
    records: int


# ─── Helpers ─────────────────────────────────────────────────────────


def _get_services(request: Request) -> Services:
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(status_code=503, detail="Services not initialised")
    return services


async def _read_upload(upload: Optional[UploadFile], limit: int) -> tuple[Optional[bytes], Optional[str]]:
    """Read an uploaded file, enforcing the size limit before hashing."""
    if upload is None:
        return None, None
    if upload.size and upload.size > limit:
        raise FileTooLarge(limit)
    content = await upload.read()
    if len(content) > limit:
        raise FileTooLarge(limit)
    return content, upload.content_type


async def registry_error_handler(request: Request, exc: RegistryError) -> JSONResponse:
    body: dict = {"ok": False, "code": exc.code, "message": exc.message}
    if exc.details:
        body["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=body)


# ─── Endpoints ───────────────────────────────────────────────────────

router = APIRouter()


@router.post(
    "/api/university/upload",
    summary="Register a credential PDF",
    tags=["Registration"],
    responses={
        400: {"description": "Missing file, wrong type, or empty fields"},
        401: {"description": "Missing or wrong token"},
        413: {"description": "File too large"},
        500: {"description": "Storage failure"},
    },
)
async def register_certificate(
    token: Optional[str] = Form(None),
    holder_name: Optional[str] = Form(None, alias="holderName"),
    credential_type: Optional[str] = Form(None, alias="credentialType"),
    issue_date: Optional[str] = Form(None, alias="issueDate"),
    pdf: Optional[UploadFile] = File(None),
    services: Services = Depends(_get_services),
) -> RegisterResponse:
    """Register a PDF once per distinct content.

    Re-uploading identical bytes returns the original record with
    **status** `duplicate`; **metadataDiffers** tells the caller when the
    submitted metadata was discarded in favour of the original.
    """
    # Token first: an unauthorised caller learns nothing about the upload
    services.registration.authorizer.authorize(token)
    data, mime_type = await _read_upload(pdf, services.settings.max_upload_bytes)

    result = await asyncio.to_thread(
        services.registration.register,
        token,
        data,
        mime_type,
        holder_name,
        credential_type,
        issue_date,
    )
    message = (
        "Certificate registered"
        if result.created
        else "Certificate already exists with the same digest"
    )
    return RegisterResponse(
        status=result.status,
        message=message,
        digest=result.digest,
        metadata_differs=result.metadata_differs,
        certificate=result.record,
    )


@router.post(
    "/api/verify",
    summary="Verify a PDF against the registry",
    tags=["Verification"],
    responses={
        400: {"description": "Missing file or wrong type"},
        413: {"description": "File too large"},
    },
)
async def verify_certificate(
    pdf: Optional[UploadFile] = File(None),
    services: Services = Depends(_get_services),
) -> VerifyResponse:
    """A non-match is still a successful response with **valid** `false`."""
    data, mime_type = await _read_upload(pdf, services.settings.max_upload_bytes)
    result = await asyncio.to_thread(services.verification.verify, data, mime_type)
    return VerifyResponse(
        valid=result.matched,
        digest=result.digest,
        message="Match found" if result.matched else "No match found",
        certificate=result.record,
    )


@router.get(
    "/health",
    summary="Health check",
    tags=["System"],
    responses={503: {"description": "Services not yet initialised"}},
)
async def health_check(services: Services = Depends(_get_services)) -> HealthResponse:
    records = await asyncio.to_thread(services.store.count)
    return HealthResponse(status="healthy", version=__version__, records=records)


# ─── FastAPI App ─────────────────────────────────────────────────────


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the app. Without ``settings`` they are loaded at startup."""
    app = FastAPI(
        title="UniVerify API",
        description=(
            "Register credential documents and verify copies by content digest. "
            "A copy verifies only if it is byte-identical to a registered document."
        ),
        version=__version__,
        lifespan=lifespan,
    )
    if settings is not None:
        app.state.services = build_services(settings)
    app.add_exception_handler(RegistryError, registry_error_handler)
    app.include_router(router)
    return app


app = create_app()
