"""Schema validation and loading for JSON signing request files."""

from __future__ import annotations

import json
from importlib import resources
from pathlib import Path
from typing import Any, Mapping

import jsonschema

from codesign_batch.models import SigningRequest

REQUEST_SCHEMA = "signing_request.schema.json"


def _load_schema(name: str) -> dict[str, Any]:
    """Load a JSON schema bundled in the package."""
    with resources.files("codesign_batch.schemas").joinpath(name).open("r", encoding="utf-8") as handle:
        return json.load(handle)


def validate_signing_request(payload: Mapping[str, Any]) -> None:
    """Validate a signing request payload against the schema."""
    schema = _load_schema(REQUEST_SCHEMA)
    jsonschema.validate(dict(payload), schema)


def read_request_payload(path: Path) -> dict[str, Any]:
    """Read a request file that must hold a JSON object."""
    payload = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise jsonschema.ValidationError(f"{path} must contain a JSON object.")
    return payload


def build_signing_request(
    payload: Mapping[str, Any],
    *,
    base_dir: Path | None = None,
) -> SigningRequest:
    """Validate a payload and turn it into a SigningRequest."""
    validate_signing_request(payload)
    return SigningRequest.from_mapping(payload, base_dir=base_dir)


def load_signing_request(path: Path) -> SigningRequest:
    """Load a request file; relative paths resolve against its directory."""
    payload = read_request_payload(path)
    return build_signing_request(payload, base_dir=path.resolve().parent)
