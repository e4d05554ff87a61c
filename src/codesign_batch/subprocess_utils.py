"""Subprocess helpers with captured or line-streamed output and timeouts."""

from __future__ import annotations

import logging
import os
import subprocess
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Any, Callable, Sequence

LOGGER = logging.getLogger("codesign_batch.subprocess")
READER_JOIN_TIMEOUT = 5.0

LineCallback = Callable[[str], None]


@dataclass(frozen=True)
class CommandResult:
    """Captured output from a command invocation."""

    command: list[str]
    returncode: int
    stdout: str
    stderr: str
    timed_out: bool


@dataclass(frozen=True)
class StreamResult:
    """Exit status of a command whose output was streamed line by line."""

    command: list[str]
    returncode: int | None
    timed_out: bool
    drained: bool = True


def _creation_flags() -> int:
    """Return Popen creation flags that keep child consoles hidden on Windows."""
    if os.name == "nt":
        return getattr(subprocess, "CREATE_NO_WINDOW", 0)
    return 0


def _startup_info() -> Any:
    if os.name != "nt":
        return None
    info = subprocess.STARTUPINFO()  # type: ignore[attr-defined]
    info.dwFlags |= subprocess.STARTF_USESHOWWINDOW  # type: ignore[attr-defined]
    info.wShowWindow = subprocess.SW_HIDE  # type: ignore[attr-defined]
    return info


def _decode(raw: str | bytes | None) -> str:
    if raw is None:
        return ""
    if isinstance(raw, bytes):
        return raw.decode("utf-8", errors="replace")
    return raw


def run_command(
    command: Sequence[str],
    *,
    cwd: Path | None = None,
    timeout: float | None = None,
) -> CommandResult:
    """Run a command to completion and capture stdout/stderr."""
    cmd_list = [str(item) for item in command]
    try:
        result = subprocess.run(
            cmd_list,
            cwd=cwd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
            timeout=timeout,
            creationflags=_creation_flags(),
        )
    except subprocess.TimeoutExpired as exc:
        stderr = _decode(exc.stderr)
        timeout_message = f"Command timed out after {timeout} seconds."
        stderr = f"{stderr}\n{timeout_message}" if stderr else timeout_message
        return CommandResult(cmd_list, 124, _decode(exc.stdout), stderr, True)
    return CommandResult(cmd_list, result.returncode, result.stdout, result.stderr, False)


def _pump_lines(stream: IO[str], on_line: LineCallback) -> None:
    """Feed each line of a text stream to a callback until EOF."""
    try:
        for line in iter(stream.readline, ""):
            on_line(line.rstrip("\r\n"))
    finally:
        stream.close()


def _start_reader(name: str, stream: IO[str] | None, on_line: LineCallback) -> threading.Thread:
    if stream is None:
        raise RuntimeError(f"{name} was not captured.")
    thread = threading.Thread(
        target=_pump_lines,
        args=(stream, on_line),
        name=f"codesign-batch-{name}",
        daemon=True,
    )
    thread.start()
    return thread


def stream_command(
    command: Sequence[str],
    *,
    cwd: Path | None = None,
    timeout: float | None = None,
    on_stdout: LineCallback,
    on_stderr: LineCallback,
) -> StreamResult:
    """Run a command, handing each output line to a callback as it arrives.

    One reader thread per stream drains the pipes while the calling thread
    waits for exit, so a chatty child never blocks on a full pipe buffer. On
    timeout the child is killed outright and ``returncode`` is None; any other
    exception while waiting kills the child before propagating. Reader threads
    are joined for a bounded time; ``drained`` is False when one outlived the
    join, in which case later output lines may still arrive.
    """
    cmd_list = [str(item) for item in command]
    process = subprocess.Popen(
        cmd_list,
        cwd=cwd,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        encoding="utf-8",
        errors="replace",
        shell=False,
        creationflags=_creation_flags(),
        startupinfo=_startup_info(),
    )
    readers = [
        _start_reader("stdout", process.stdout, on_stdout),
        _start_reader("stderr", process.stderr, on_stderr),
    ]
    timed_out = False
    try:
        process.wait(timeout=timeout)
    except subprocess.TimeoutExpired:
        timed_out = True
        LOGGER.debug("Killing pid %s after %s seconds", process.pid, timeout)
        process.kill()
        process.wait()
    except BaseException:
        process.kill()
        process.wait()
        raise
    finally:
        drained = True
        for reader in readers:
            reader.join(READER_JOIN_TIMEOUT)
            if reader.is_alive():
                drained = False
                LOGGER.warning("%s reader still running after process exit", reader.name)
    returncode = None if timed_out else process.returncode
    return StreamResult(cmd_list, returncode, timed_out, drained)
