"""Tool discovery configuration helpers."""

from __future__ import annotations

import json
import os
from pathlib import Path

ENV_TOOL_PATHS = "CODESIGN_BATCH_TOOL_PATHS"
ENV_CODESIGNTOOL_HOME = "CODESIGNTOOL_HOME"
TOOL_DIR_NAME = "CodeSignTool"


def _default_candidate_paths() -> list[Path]:
    """Return default tool config locations in priority order."""
    return [Path.cwd() / "tools" / "tool_paths.json"]


def _load_candidate(candidate: Path) -> dict[str, Path] | None:
    """Load a tool config from a single candidate path."""
    if not candidate.exists():
        return None
    try:
        data = json.loads(candidate.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return {}
    if not isinstance(data, dict):
        return {}
    result: dict[str, Path] = {}
    for key, value in data.items():
        if isinstance(value, str):
            result[key] = Path(value).expanduser()
    return result


def load_tool_paths(path: Path | None = None) -> dict[str, Path]:
    """Load tool paths from JSON config, if available."""
    if path:
        return _load_candidate(path) or {}
    env_path = os.environ.get(ENV_TOOL_PATHS)
    if env_path:
        return _load_candidate(Path(env_path)) or {}
    for candidate in _default_candidate_paths():
        result = _load_candidate(candidate)
        if result is not None:
            return result
    return {}


def resolve_tool_dir(explicit: str | Path | None = None) -> Path | None:
    """Return the CodeSignTool installation directory, if one is configured."""
    if explicit:
        return Path(explicit).expanduser()
    configured = load_tool_paths().get("codesigntool")
    if configured:
        return configured
    env_home = os.environ.get(ENV_CODESIGNTOOL_HOME)
    if env_home:
        return Path(env_home).expanduser()
    local = Path.cwd() / TOOL_DIR_NAME
    if local.is_dir():
        return local
    return None


def classpath_for(tool_dir: Path) -> Path:
    """Return the classpath wildcard covering every jar shipped with the tool."""
    return tool_dir / "jar" / "*"
