"""Environment checks for codesign-batch."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path

from codesign_batch.subprocess_utils import run_command
from codesign_batch.tools.config import resolve_tool_dir
from codesign_batch.tools.java import JavaNotFoundError, find_java

MIN_PYTHON = (3, 10)
JAVA_VERSION_TIMEOUT = 30.0


@dataclass(frozen=True)
class CheckResult:
    """Result of a single doctor check."""

    name: str
    status: str
    detail: str


def _status(name: str, status: str, detail: str) -> CheckResult:
    """Helper to build a CheckResult."""
    return CheckResult(name=name, status=status, detail=detail)


def check_python_version() -> CheckResult:
    """Verify the running Python meets the minimum version."""
    if sys.version_info < MIN_PYTHON:
        return _status(
            "python",
            "error",
            f"Python {MIN_PYTHON[0]}.{MIN_PYTHON[1]}+ required",
        )
    return _status("python", "ok", f"{sys.version_info.major}.{sys.version_info.minor}")


def check_java(java_home: str | Path | None = None) -> CheckResult:
    """Locate java and make sure it answers ``-version``."""
    try:
        java_path = find_java(java_home)
    except JavaNotFoundError as exc:
        return _status("java", "error", str(exc))
    try:
        result = run_command([str(java_path), "-version"], timeout=JAVA_VERSION_TIMEOUT)
    except OSError as exc:
        return _status("java", "error", f"{java_path}: {exc}")
    if result.returncode != 0:
        return _status("java", "warn", f"{java_path}: non-zero exit {result.returncode}")
    # java -version reports on stderr
    output = (result.stderr or result.stdout).strip().splitlines()
    banner = output[0] if output else "version unknown"
    return _status("java", "ok", f"{java_path} ({banner})")


def check_codesigntool(tool_dir: str | Path | None = None) -> CheckResult:
    """Verify a CodeSignTool directory with a populated jar/ folder is configured."""
    resolved = resolve_tool_dir(tool_dir)
    if resolved is None:
        return _status("codesigntool", "error", "CodeSignTool directory not configured")
    if not resolved.is_dir():
        return _status("codesigntool", "error", f"directory not found: {resolved}")
    jars = sorted((resolved / "jar").glob("*.jar"))
    if not jars:
        return _status("codesigntool", "error", f"no jars in {resolved / 'jar'}")
    return _status("codesigntool", "ok", f"{resolved} ({len(jars)} jar(s))")


def run_doctor(
    *,
    java_home: str | Path | None = None,
    tool_dir: str | Path | None = None,
) -> list[CheckResult]:
    """Run all environment checks and return the aggregated results."""
    return [
        check_python_version(),
        check_java(java_home),
        check_codesigntool(tool_dir),
    ]
