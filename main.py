#!/usr/bin/env python3
"""
UniVerify — Entry Point
========================

Usage:
    python main.py serve                                  # HTTP server on HOST:PORT
    python main.py register cert.pdf --token S \\
        --holder "Alice" --type "BSc" --date 2024-01-01   # Register directly
    python main.py verify cert.pdf                        # Verify directly

Configuration comes from the environment (and univ.env if present).
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import uvicorn

from api import build_services, create_app
from univerify.config import Settings, configure_logging
from univerify.exceptions import MissingFile, RegistryError
from univerify.models import RegistrationResult, VerificationResult

# ─── ANSI Color Constants ───────────────────────────────────────────

_RED = "\033[91m"
_YELLOW = "\033[93m"
_GREEN = "\033[92m"
_CYAN = "\033[96m"
_DIM = "\033[2m"
_BOLD = "\033[1m"
_RESET = "\033[0m"
_WIDTH = 72


# ─── Pretty Printers ────────────────────────────────────────────────


def _print_header(title: str, digest: str) -> None:
    print(f"\n{'=' * _WIDTH}")
    print(f"{_BOLD}{_CYAN}  {title}{_RESET}")
    print(f"{'=' * _WIDTH}")
    print(f"  Digest:      {_DIM}{digest}{_RESET}")
    print(f"{'─' * _WIDTH}")


def print_registration(result: RegistrationResult) -> int:
    record = result.record
    _print_header("CERTIFICATE REGISTRATION", result.digest)
    print(f"  Record:      {record.id}")
    print(f"  Holder:      {record.holder_name}")
    print(f"  Credential:  {record.credential_type}")
    print(f"  Issued:      {record.issue_date}")
    print(f"  Archived as: {record.archive_ref}")
    print(f"  Created:     {record.created_at.isoformat()}")
    print(f"{'=' * _WIDTH}")
    if result.created:
        print(f"  {_GREEN}{_BOLD}REGISTERED{_RESET}")
    else:
        print(f"  {_YELLOW}{_BOLD}ALREADY REGISTERED{_RESET}  (existing record kept)")
        if result.metadata_differs:
            print(f"  {_YELLOW}Submitted metadata differs from the stored record and was discarded.{_RESET}")
    print(f"{'=' * _WIDTH}\n")
    return 0


def print_verification(result: VerificationResult) -> int:
    _print_header("CERTIFICATE VERIFICATION", result.digest)
    if result.record is not None:
        print(f"  Holder:      {result.record.holder_name}")
        print(f"  Credential:  {result.record.credential_type}")
        print(f"  Issued:      {result.record.issue_date}")
        print(f"  Registered:  {result.record.created_at.isoformat()}")
        print(f"{'=' * _WIDTH}")
        print(f"  {_GREEN}{_BOLD}VALID: matches a registered certificate{_RESET}")
    else:
        print(f"  {_RED}{_BOLD}NO MATCH: this file was never registered{_RESET}")
    print(f"{'=' * _WIDTH}\n")
    return 0 if result.matched else 1


def print_error(exc: RegistryError) -> int:
    print(f"\n  {_RED}{_BOLD}[{exc.code}]{_RESET} {exc.message}")
    for k, v in exc.details.items():
        print(f"    {_DIM}{k}: {v}{_RESET}")
    print()
    return 1


# ─── Commands ────────────────────────────────────────────────────────


def _read_pdf(path: str) -> tuple[bytes, str]:
    """Local files have no upload MIME type; trust the .pdf extension."""
    file_path = Path(path)
    mime_type = "application/pdf" if file_path.suffix.lower() == ".pdf" else "application/octet-stream"
    try:
        return file_path.read_bytes(), mime_type
    except OSError as e:
        raise MissingFile(f"Cannot read {path}: {e.strerror or e}", {"path": path}) from None


def cmd_serve(settings: Settings, args: argparse.Namespace) -> int:
    uvicorn.run(
        create_app(settings),
        host=args.host or settings.host,
        port=args.port or settings.port,
        log_level=settings.log_level.lower(),
    )
    return 0


def cmd_register(settings: Settings, args: argparse.Namespace) -> int:
    services = build_services(settings)
    data, mime_type = _read_pdf(args.file)
    result = services.registration.register(
        args.token, data, mime_type, args.holder, args.type, args.date
    )
    return print_registration(result)


def cmd_verify(settings: Settings, args: argparse.Namespace) -> int:
    services = build_services(settings)
    data, mime_type = _read_pdf(args.file)
    return print_verification(services.verification.verify(data, mime_type))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="univerify", description=__doc__.split("\n\n")[0])
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="run the HTTP API")
    serve.add_argument("--host")
    serve.add_argument("--port", type=int)
    serve.set_defaults(handler=cmd_serve)

    register = sub.add_parser("register", help="register a PDF")
    register.add_argument("file")
    register.add_argument("--token", required=True)
    register.add_argument("--holder", required=True)
    register.add_argument("--type", required=True)
    register.add_argument("--date", required=True)
    register.set_defaults(handler=cmd_register)

    verify = sub.add_parser("verify", help="verify a PDF")
    verify.add_argument("file")
    verify.set_defaults(handler=cmd_verify)
    return parser


# ─── Main ────────────────────────────────────────────────────────────


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    try:
        return args.handler(settings, args)
    except RegistryError as e:
        return print_error(e)


if __name__ == "__main__":
    sys.exit(main())
