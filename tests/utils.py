from __future__ import annotations

import json
import sys
import textwrap
from dataclasses import dataclass
from pathlib import Path

FAKE_JAVA_SOURCE = textwrap.dedent(
    """
    import json
    import os
    import sys
    import time
    from pathlib import Path

    args = sys.argv[1:]
    log_path = Path(__file__).resolve().parent / "calls.jsonl"
    with log_path.open("a", encoding="utf-8") as handle:
        handle.write(json.dumps({"args": args, "cwd": os.getcwd()}) + "\\n")

    if "-version" in args:
        sys.stderr.write('openjdk version "17.0.2" 2022-01-18\\n')
        sys.exit(0)

    values = {}
    for arg in args:
        if arg.startswith("-") and "=" in arg:
            key, value = arg[1:].split("=", 1)
            values[key] = value

    source = Path(values["input_file_path"])
    output_dir = Path(values["output_dir_path"])
    mode = source.read_text(encoding="utf-8").strip()

    if mode == "fail":
        print("Signing failed for " + source.name)
        sys.exit(3)
    if mode == "error-stdout":
        print("Error: invalid credentials for " + values["username"])
        sys.exit(0)
    if mode == "stderr":
        sys.stderr.write("warning from " + values["password"] + "\\n")
        sys.exit(0)
    if mode == "hang":
        print("waiting", flush=True)
        time.sleep(60)
        sys.exit(0)
    if mode == "no-output":
        print("pretending to sign")
        sys.exit(0)

    (output_dir / source.name).write_text("signed:" + mode, encoding="utf-8")
    print("Code signed successfully: " + str(output_dir / source.name))
    sys.exit(0)
    """
).lstrip()


@dataclass(frozen=True)
class FakeJava:
    """A java stand-in that imitates CodeSignTool's sign command."""

    java_home: Path
    tool_dir: Path

    @property
    def executable(self) -> Path:
        return self.java_home / "bin" / "java"

    def calls(self) -> list[dict[str, object]]:
        log_path = self.executable.parent / "calls.jsonl"
        if not log_path.exists():
            return []
        lines = log_path.read_text(encoding="utf-8").splitlines()
        return [json.loads(line) for line in lines if line.strip()]


def write_fake_java(root: Path) -> FakeJava:
    """Create JAVA_HOME/bin/java plus a CodeSignTool directory under root."""
    java_home = root / "jdk"
    bin_dir = java_home / "bin"
    bin_dir.mkdir(parents=True)
    java = bin_dir / "java"
    java.write_text(f"#!{sys.executable}\n{FAKE_JAVA_SOURCE}", encoding="utf-8")
    java.chmod(0o755)

    tool_dir = root / "CodeSignTool"
    (tool_dir / "jar").mkdir(parents=True)
    (tool_dir / "jar" / "code_sign_tool-1.3.0.jar").write_bytes(b"PK\x03\x04")
    return FakeJava(java_home=java_home, tool_dir=tool_dir)


def write_inputs(directory: Path, files: dict[str, str]) -> list[Path]:
    """Write input files whose content selects the fake tool's behaviour."""
    directory.mkdir(parents=True, exist_ok=True)
    paths = []
    for name, content in files.items():
        path = directory / name
        path.write_text(content, encoding="utf-8")
        paths.append(path)
    return paths


def empty_path_env(java_home: Path | None = None) -> dict[str, str]:
    """Return an environment with no PATH entries and an optional JAVA_HOME."""
    env = {"PATH": ""}
    if java_home is not None:
        env["JAVA_HOME"] = str(java_home)
    return env
