"""Tool wrapper exports."""

from codesign_batch.tools.codesigntool import (
    build_sign_command,
    is_error_line,
    render_command,
    sign_file,
)
from codesign_batch.tools.java import JavaNotFoundError, find_java, java_search_paths

__all__ = [
    "JavaNotFoundError",
    "build_sign_command",
    "find_java",
    "is_error_line",
    "java_search_paths",
    "render_command",
    "sign_file",
]
