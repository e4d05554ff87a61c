"""Locate the Java runtime used to launch CodeSignTool."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping

JAVA_HOME_ENV = "JAVA_HOME"
PATH_ENV = "PATH"


class JavaNotFoundError(FileNotFoundError):
    """Raised when no java executable exists in any candidate directory."""

    def __init__(self, executable: str, searched: list[Path] | None = None) -> None:
        super().__init__(f"Unable to find java executable: {executable}")
        self.executable = executable
        self.searched = list(searched or [])


def java_executable_name(os_name: str | None = None) -> str:
    """Return the java executable file name for the current platform."""
    return "java.exe" if (os_name or os.name) == "nt" else "java"


def java_search_paths(
    java_home: str | Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> list[Path]:
    """Return candidate directories: JAVA_HOME/bin first, then PATH entries."""
    env = os.environ if environ is None else environ
    home = str(java_home) if java_home else env.get(JAVA_HOME_ENV, "")
    paths: list[Path] = []
    if home:
        paths.append(Path(home) / "bin")
    path_value = env.get(PATH_ENV, "")
    paths.extend(Path(entry) for entry in path_value.split(os.pathsep) if entry)
    return paths


def find_java(
    java_home: str | Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> Path:
    """Return the first existing java executable.

    ``java_home`` overrides the JAVA_HOME environment variable. Only file
    existence is checked; a java binary that cannot run fails at launch.
    """
    executable = java_executable_name()
    searched = java_search_paths(java_home, environ=environ)
    for directory in searched:
        candidate = directory / executable
        if candidate.is_file():
            return candidate
    raise JavaNotFoundError(executable, searched)
