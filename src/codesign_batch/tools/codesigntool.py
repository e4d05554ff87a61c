"""Wrapper utilities for running SSL.com CodeSignTool."""

from __future__ import annotations

import errno
import threading
from pathlib import Path
from typing import Sequence

from codesign_batch.messages import MessageLog
from codesign_batch.models import SigningRequest, SignOutcome
from codesign_batch.subprocess_utils import stream_command
from codesign_batch.tools.config import classpath_for

MAIN_CLASS = "com.ssl.code.signing.tool.CodeSignTool"
SIGN_COMMAND = "sign"
ERROR_MARKER = "Error:"
QUOTED_FLAGS = ("-username", "-password", "-input_file_path", "-output_dir_path")


def build_sign_command(
    java_path: Path,
    tool_dir: Path,
    output_dir: Path,
    source: Path,
    request: SigningRequest,
) -> list[str]:
    """Build the CodeSignTool ``sign`` command line for one file."""
    command = [
        str(java_path),
        "-cp",
        str(classpath_for(tool_dir)),
        MAIN_CLASS,
        SIGN_COMMAND,
        f"-username={request.username}",
        f"-password={request.password}",
        f"-input_file_path={source}",
        f"-output_dir_path={output_dir}",
    ]
    if request.credential_id:
        command.append(f"-credential_id={request.credential_id}")
    if request.totp_secret:
        command.append(f"-totp_secret={request.totp_secret}")
    if request.program_name:
        command.append(f"-program_name={request.program_name}")
    return command


def _render_token(token: str, previous: str | None) -> str:
    if previous == "-cp":
        return f'"{token}"'
    flag, sep, value = token.partition("=")
    if sep and flag in QUOTED_FLAGS:
        return f'{flag}="{value}"'
    return token


def render_command(command: Sequence[str]) -> str:
    """Render a sign command in CodeSignTool's documented quoting style."""
    rendered = []
    previous = None
    for token in command:
        rendered.append(_render_token(token, previous))
        previous = token
    return " ".join(rendered)


def is_error_line(line: str, *, stderr: bool = False) -> bool:
    """Return True if a line of tool output signals a failure.

    CodeSignTool reports some errors on stdout with an ``Error:`` prefix, so
    stdout is scanned for the marker while stderr always counts.
    """
    return stderr or ERROR_MARKER in line


def sign_file(
    java_path: Path,
    tool_dir: Path,
    output_dir: Path,
    source: Path,
    request: SigningRequest,
    log: MessageLog,
) -> SignOutcome:
    """Sign ``source`` into ``output_dir`` and report whether it worked."""
    if not source.is_file():
        raise FileNotFoundError(errno.ENOENT, "Cannot find file to sign", str(source))

    command = build_sign_command(java_path, tool_dir, output_dir, source, request)
    log.info("Executing: %s", render_command(command))

    error_seen = threading.Event()

    def on_stdout(line: str) -> None:
        if is_error_line(line):
            error_seen.set()
            log.error(line, source=source)
        else:
            log.info(line, source=source)

    def on_stderr(line: str) -> None:
        error_seen.set()
        log.error(line, source=source)

    result = stream_command(
        command,
        cwd=tool_dir,
        timeout=request.timeout_seconds,
        on_stdout=on_stdout,
        on_stderr=on_stderr,
    )
    if result.timed_out:
        log.error(
            "CodeSignTool did not exit before the %s millisecond timeout.",
            request.timeout_ms,
            source=source,
        )
        return SignOutcome(
            source=source,
            success=False,
            returncode=None,
            error_output=error_seen.is_set(),
            timed_out=True,
        )

    if not result.drained:
        log.error(
            "CodeSignTool output was still open after exit; not trusting the result.",
            source=source,
        )
    failed = result.returncode != 0 or error_seen.is_set() or not result.drained
    if failed:
        log.error("CodeSignTool exited code %s", result.returncode, source=source)
    else:
        log.info("CodeSignTool exited code %s", result.returncode, source=source)
    return SignOutcome(
        source=source,
        success=not failed,
        returncode=result.returncode,
        error_output=error_seen.is_set(),
    )
