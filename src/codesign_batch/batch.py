"""Sign a batch of files in place through a transient staging directory."""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
import traceback
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Mapping

from codesign_batch.messages import MessageLog
from codesign_batch.models import BatchResult, SigningRequest, SignOutcome
from codesign_batch.redaction import Redactor
from codesign_batch.tools.codesigntool import sign_file
from codesign_batch.tools.java import find_java

STAGING_PREFIX = "signing-"
NO_FILES_MESSAGE = "No files specified to sign."


def staging_timestamp(now: datetime | None = None) -> str:
    """Return a yyyyMMddHHmmssffff timestamp (ffff = ten-thousandths of a second)."""
    moment = now or datetime.now()
    return f"{moment:%Y%m%d%H%M%S}{moment.microsecond // 100:04d}"


def create_staging_directory(parent: Path | None = None, *, now: datetime | None = None) -> Path:
    """Create a new, uniquely named staging directory under the temp dir."""
    base = Path(parent) if parent else Path(tempfile.gettempdir())
    name = f"{STAGING_PREFIX}{staging_timestamp(now)}"
    candidate = base / name
    attempt = 0
    while True:
        try:
            candidate.mkdir(parents=True)
            return candidate
        except FileExistsError:
            attempt += 1
            candidate = base / f"{name}-{attempt}"


@contextmanager
def staging_directory(parent: Path | None = None) -> Iterator[Path]:
    """Yield a staging directory that is removed with its contents on exit."""
    path = create_staging_directory(parent)
    try:
        yield path
    finally:
        shutil.rmtree(path)


def replace_with_signed(source: Path, staged: Path) -> None:
    """Delete ``source`` and move ``staged`` into its place.

    Not atomic: if the move fails after the delete, the original is gone.
    """
    if not staged.is_file():
        raise FileNotFoundError(f"Signed output not found: {staged}")
    source.unlink()
    shutil.move(str(staged), str(source))


def _run(
    request: SigningRequest,
    tool_dir: Path,
    log: MessageLog,
    outcomes: list[SignOutcome],
    environ: Mapping[str, str] | None,
    staging_parent: Path | None,
) -> None:
    java_path = find_java(request.java_home, environ=environ)
    with staging_directory(staging_parent) as output_dir:
        for item in request.files:
            source = Path(os.path.abspath(item))
            outcome = sign_file(java_path, tool_dir, output_dir, source, request, log)
            outcomes.append(outcome)
            if not outcome.success:
                continue
            staged = output_dir / source.name
            replace_with_signed(source, staged)
            log.info("Moved file '%s' to %s.", staged, source)


def sign_files(
    request: SigningRequest,
    *,
    tool_dir: Path,
    environ: Mapping[str, str] | None = None,
    logger: logging.Logger | None = None,
    staging_parent: Path | None = None,
) -> BatchResult:
    """Sign every file in ``request`` in order, replacing each signed original.

    Never raises for signing problems: a missing java, a failed move, or any
    other exception ends the batch and is reported, redacted, in the result.
    Per-file signing failures are logged and the remaining files still run.
    """
    log = MessageLog(Redactor.from_request(request), logger)

    if not request.files:
        if request.error_on_no_files:
            log.error(NO_FILES_MESSAGE)
            return BatchResult(success=False, messages=log.messages)
        log.info(NO_FILES_MESSAGE)
        return BatchResult(success=True, messages=log.messages)

    outcomes: list[SignOutcome] = []
    try:
        _run(request, Path(tool_dir), log, outcomes, environ, staging_parent)
    except Exception:
        log.error("Exception: %s", traceback.format_exc().rstrip())
        return BatchResult(success=False, messages=log.messages, outcomes=tuple(outcomes))

    signed = sum(1 for outcome in outcomes if outcome.success)
    success = signed == len(outcomes)
    summary = log.info if success else log.error
    summary("Signed %s of %s file(s).", signed, len(outcomes))
    return BatchResult(success=success, messages=log.messages, outcomes=tuple(outcomes))
