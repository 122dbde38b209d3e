"""
Runtime configuration.

Values come from the process environment, optionally seeded from an env
file (``univ.env`` by default). Real environment variables win over the
file. Bad values fail at load time, not on the first request.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from .digest import DEFAULT_ALGORITHM, check_algorithm

DEFAULT_ENV_FILE = "univ.env"
DEFAULT_MAX_UPLOAD_BYTES = 20 * 1024 * 1024


def _int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


@dataclass(frozen=True)
class Settings:
    admin_token: str = ""
    host: str = "127.0.0.1"
    port: int = 3000
    data_file: Path = Path("data/certificates.json")
    uploads_dir: Path = Path("uploads")
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    expected_mime_type: str = "application/pdf"
    digest_algorithm: str = DEFAULT_ALGORITHM
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> Settings:
        """Build settings from ``env`` (default: os.environ + env file)."""
        if env is None:
            load_dotenv(os.environ.get("UNIVERIFY_ENV_FILE", DEFAULT_ENV_FILE), override=False)
            env = os.environ

        return cls(
            admin_token=env.get("ADMIN_TOKEN", "").strip(),
            host=env.get("HOST", "").strip() or cls.host,
            port=_int(env, "PORT", cls.port),
            data_file=Path(env.get("DATA_FILE", "").strip() or cls.data_file),
            uploads_dir=Path(env.get("UPLOADS_DIR", "").strip() or cls.uploads_dir),
            max_upload_bytes=_int(env, "MAX_UPLOAD_BYTES", cls.max_upload_bytes),
            expected_mime_type=env.get("EXPECTED_MIME_TYPE", "").strip() or cls.expected_mime_type,
            digest_algorithm=check_algorithm(env.get("DIGEST_ALGORITHM", "").strip() or cls.digest_algorithm),
            log_level=(env.get("LOG_LEVEL", "").strip() or cls.log_level).upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    """Process-wide logging setup for the server and CLI entry points."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )
