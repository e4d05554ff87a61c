"""Command-line interface for codesign-batch."""

from __future__ import annotations

import argparse
import json
import logging
import os
from pathlib import Path
from typing import Any

import jsonschema

from codesign_batch import __version__
from codesign_batch.batch import sign_files
from codesign_batch.contracts import build_signing_request, read_request_payload
from codesign_batch.doctor import run_doctor
from codesign_batch.logging_utils import LogOptions, configure_logging
from codesign_batch.models import SigningRequest
from codesign_batch.redaction import Redactor
from codesign_batch.tools.config import resolve_tool_dir

LOGGER = logging.getLogger("codesign_batch.cli")

ENV_USERNAME = "CODESIGNTOOL_USERNAME"
ENV_PASSWORD = "CODESIGNTOOL_PASSWORD"
ENV_CREDENTIAL_ID = "CODESIGNTOOL_CREDENTIAL_ID"
ENV_TOTP_SECRET = "CODESIGNTOOL_TOTP_SECRET"
ENV_DEFAULTS = {
    "username": ENV_USERNAME,
    "password": ENV_PASSWORD,
    "credential_id": ENV_CREDENTIAL_ID,
    "totp_secret": ENV_TOTP_SECRET,
}
SECRET_KEYS = ("username", "password", "credential_id", "totp_secret")

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG = 2


def _add_sign_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register the sign subcommand."""
    sign = subparsers.add_parser("sign", help="Sign files in place with CodeSignTool.")
    sign.add_argument("files", nargs="*", help="Files to sign.")
    sign.add_argument(
        "--request",
        help="JSON request file; command-line flags override its values.",
    )
    sign.add_argument("--username", help=f"SSL.com account username (default: ${ENV_USERNAME}).")
    sign.add_argument("--password", help=f"SSL.com account password (default: ${ENV_PASSWORD}).")
    sign.add_argument(
        "--credential-id",
        help=f"eSigner credential ID (default: ${ENV_CREDENTIAL_ID}).",
    )
    sign.add_argument(
        "--totp-secret",
        help=f"OAuth TOTP secret (default: ${ENV_TOTP_SECRET}).",
    )
    sign.add_argument(
        "--program-name",
        help="Program name shown in the confirmation dialog when signing MSI installers.",
    )
    sign.add_argument("--java-home", help="Override JAVA_HOME when locating java.")
    sign.add_argument(
        "--timeout-ms",
        type=int,
        help="Per-file timeout for CodeSignTool in milliseconds (default: 10000).",
    )
    sign.add_argument(
        "--error-on-no-files",
        action="store_true",
        help="Fail when there is nothing to sign.",
    )
    sign.add_argument("--tool-dir", help="CodeSignTool installation directory.")
    sign.add_argument("--report", help="Write a JSON summary of the batch to this path.")


def _add_doctor_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register the doctor subcommand."""
    doctor = subparsers.add_parser("doctor", help="Check java and the CodeSignTool install.")
    doctor.add_argument("--java-home", help="Override JAVA_HOME when locating java.")
    doctor.add_argument("--tool-dir", help="CodeSignTool installation directory.")


def _add_version_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register the version subcommand."""
    subparsers.add_parser("version", help="Print the current version.")


def _absolute(value: str | None) -> str | None:
    return os.path.abspath(value) if value else None


def _request_payload(args: argparse.Namespace) -> tuple[dict[str, Any], Path | None]:
    """Merge request file values, command-line flags and environment defaults."""
    payload: dict[str, Any] = {}
    base_dir = None
    if args.request:
        request_path = Path(args.request)
        payload = read_request_payload(request_path)
        base_dir = request_path.resolve().parent

    overrides: dict[str, Any] = {
        "files": [_absolute(item) for item in args.files] if args.files else None,
        "username": args.username,
        "password": args.password,
        "credential_id": args.credential_id,
        "totp_secret": args.totp_secret,
        "program_name": args.program_name,
        "java_home": _absolute(args.java_home),
        "timeout_ms": args.timeout_ms,
        "error_on_no_files": True if args.error_on_no_files else None,
    }
    payload.update({key: value for key, value in overrides.items() if value is not None})
    for key, env_name in ENV_DEFAULTS.items():
        env_value = os.environ.get(env_name)
        if env_value and not payload.get(key):
            payload[key] = env_value
    return payload, base_dir


def _payload_redactor(payload: dict[str, Any]) -> Redactor:
    return Redactor.for_secrets(*(str(payload[key]) for key in SECRET_KEYS if payload.get(key)))


def _write_report(path: Path, payload: dict[str, object]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")


def _run_sign(args: argparse.Namespace) -> int:
    try:
        payload, base_dir = _request_payload(args)
    except (OSError, json.JSONDecodeError, jsonschema.ValidationError) as exc:
        LOGGER.error("Failed to read request file: %s", exc)
        return EXIT_CONFIG

    redactor = _payload_redactor(payload)
    try:
        request: SigningRequest = build_signing_request(payload, base_dir=base_dir)
    except jsonschema.ValidationError as exc:
        LOGGER.error("Invalid signing request: %s", redactor.censor(exc.message))
        return EXIT_CONFIG
    except ValueError as exc:
        LOGGER.error("Invalid signing request: %s", redactor.censor(exc))
        return EXIT_CONFIG

    tool_dir = resolve_tool_dir(args.tool_dir)
    if tool_dir is None:
        LOGGER.error("CodeSignTool directory not found; pass --tool-dir or set CODESIGNTOOL_HOME.")
        return EXIT_CONFIG

    result = sign_files(request, tool_dir=tool_dir)
    if args.report:
        try:
            _write_report(Path(args.report), result.as_dict())
        except OSError as exc:
            LOGGER.error("Failed to write report %s: %s", args.report, exc)
            return EXIT_FAILED
    return EXIT_OK if result.success else EXIT_FAILED


def main(argv: list[str] | None = None) -> int:
    """Run the CLI entrypoint and return an exit code."""
    parser = argparse.ArgumentParser(
        prog="codesign-batch",
        description="Sign files in place with SSL.com CodeSignTool.",
    )
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (repeatable).",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Reduce log output to warnings and errors.",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Emit logs as JSON on stderr.",
    )
    parser.add_argument(
        "--log-file",
        help="Optional path for JSON log output.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_sign_parser(subparsers)
    _add_doctor_parser(subparsers)
    _add_version_parser(subparsers)

    args = parser.parse_args(argv)
    log_file_value = getattr(args, "log_file", None)
    log_options = LogOptions(
        verbose=getattr(args, "verbose", 0) or 0,
        quiet=bool(getattr(args, "quiet", False)),
        log_file=Path(log_file_value) if log_file_value else None,
        json_console=bool(getattr(args, "log_json", False)),
    )
    configure_logging(log_options)

    if args.command == "version":
        print(__version__)
        return EXIT_OK
    if args.command == "doctor":
        results = run_doctor(java_home=args.java_home, tool_dir=args.tool_dir)
        for result in results:
            LOGGER.info("%s: %s - %s", result.name, result.status, result.detail)
        if any(result.status == "error" for result in results):
            return EXIT_FAILED
        return EXIT_OK
    if args.command == "sign":
        return _run_sign(args)

    parser.error("Unknown command")
    return EXIT_CONFIG


if __name__ == "__main__":
    raise SystemExit(main())
