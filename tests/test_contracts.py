from __future__ import annotations

import json
from pathlib import Path

import jsonschema
import pytest

from codesign_batch.contracts import (
    build_signing_request,
    load_signing_request,
    validate_signing_request,
)


def test_load_signing_request_resolves_against_file(tmp_path: Path) -> None:
    request_path = tmp_path / "config" / "sign.json"
    request_path.parent.mkdir()
    request_path.write_text(
        json.dumps(
            {
                "files": ["../dist/app.exe"],
                "username": "user",
                "password": "pw",
                "credential_id": "cred",
                "timeout_ms": 30000,
            }
        ),
        encoding="utf-8",
    )

    request = load_signing_request(request_path)

    assert request.files == (request_path.resolve().parent / ".." / "dist" / "app.exe",)
    assert request.credential_id == "cred"
    assert request.timeout_ms == 30000


def test_validate_requires_credentials() -> None:
    with pytest.raises(jsonschema.ValidationError, match="password"):
        validate_signing_request({"files": [], "username": "user"})


@pytest.mark.parametrize(
    "payload",
    [
        {"username": "u", "password": "p", "timeout_ms": 0},
        {"username": "u", "password": "p", "files": "app.exe"},
        {"username": "u", "password": "p", "unknown": True},
        {"username": "", "password": "p"},
    ],
)
def test_validate_rejects_invalid_payloads(payload) -> None:
    with pytest.raises(jsonschema.ValidationError):
        validate_signing_request(payload)


def test_build_signing_request_allows_null_optionals() -> None:
    request = build_signing_request(
        {"username": "u", "password": "p", "totp_secret": None, "files": []}
    )
    assert request.totp_secret is None
    assert request.files == ()


def test_load_rejects_non_object(tmp_path: Path) -> None:
    request_path = tmp_path / "sign.json"
    request_path.write_text("[]", encoding="utf-8")
    with pytest.raises(jsonschema.ValidationError):
        load_signing_request(request_path)
