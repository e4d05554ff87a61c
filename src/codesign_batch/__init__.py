"""Batch code signing through SSL.com CodeSignTool."""

from __future__ import annotations

__version__ = "0.1.0"

from codesign_batch.batch import sign_files  # noqa: E402
from codesign_batch.models import BatchResult, SigningRequest, SignOutcome  # noqa: E402

__all__ = ["BatchResult", "SignOutcome", "SigningRequest", "__version__", "sign_files"]
