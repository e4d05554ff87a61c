"""Request and result types for batch signing."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping

DEFAULT_TIMEOUT_MS = 10000


def _optional_text(value: Any) -> str | None:
    """Normalize empty optional strings to None."""
    if value is None:
        return None
    text = str(value)
    return text or None


def _resolve(path: str | Path, base_dir: Path | None) -> Path:
    candidate = Path(path).expanduser()
    if base_dir is not None and not candidate.is_absolute():
        return base_dir / candidate
    return candidate


@dataclass(frozen=True)
class SigningRequest:
    """Files to sign plus the CodeSignTool credentials and options."""

    files: tuple[Path, ...]
    username: str = field(repr=False)
    password: str = field(repr=False)
    credential_id: str | None = field(default=None, repr=False)
    totp_secret: str | None = field(default=None, repr=False)
    program_name: str | None = None
    java_home: Path | None = None
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    error_on_no_files: bool = False

    def __post_init__(self) -> None:
        if not self.username:
            raise ValueError("username is required.")
        if not self.password:
            raise ValueError("password is required.")
        if int(self.timeout_ms) <= 0:
            raise ValueError("timeout_ms must be positive.")
        object.__setattr__(self, "files", tuple(Path(item) for item in self.files))
        object.__setattr__(self, "credential_id", _optional_text(self.credential_id))
        object.__setattr__(self, "totp_secret", _optional_text(self.totp_secret))
        object.__setattr__(self, "program_name", _optional_text(self.program_name))
        object.__setattr__(self, "timeout_ms", int(self.timeout_ms))
        if self.java_home is not None:
            object.__setattr__(self, "java_home", Path(self.java_home))

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0

    @classmethod
    def from_mapping(
        cls,
        payload: Mapping[str, Any],
        *,
        base_dir: Path | None = None,
    ) -> SigningRequest:
        """Build a request from a JSON-style mapping."""
        files: Iterable[str | Path] = payload.get("files") or ()
        java_home = payload.get("java_home")
        return cls(
            files=tuple(_resolve(item, base_dir) for item in files),
            username=payload.get("username") or "",
            password=payload.get("password") or "",
            credential_id=payload.get("credential_id"),
            totp_secret=payload.get("totp_secret"),
            program_name=payload.get("program_name"),
            java_home=_resolve(java_home, base_dir) if java_home else None,
            timeout_ms=payload.get("timeout_ms") or DEFAULT_TIMEOUT_MS,
            error_on_no_files=bool(payload.get("error_on_no_files", False)),
        )


@dataclass(frozen=True)
class SignOutcome:
    """Result of a single CodeSignTool run."""

    source: Path
    success: bool
    returncode: int | None
    error_output: bool
    timed_out: bool = False


@dataclass(frozen=True)
class LogMessage:
    """A redacted message surfaced by a batch run."""

    level: str
    text: str


@dataclass(frozen=True)
class BatchResult:
    """Overall batch verdict plus everything that was logged."""

    success: bool
    messages: tuple[LogMessage, ...] = ()
    outcomes: tuple[SignOutcome, ...] = ()

    @property
    def errors(self) -> list[str]:
        return [message.text for message in self.messages if message.level == "error"]

    def as_dict(self) -> dict[str, object]:
        return {
            "success": self.success,
            "messages": [{"level": item.level, "text": item.text} for item in self.messages],
            "outcomes": [
                {
                    "source": str(outcome.source),
                    "success": outcome.success,
                    "returncode": outcome.returncode,
                    "error_output": outcome.error_output,
                    "timed_out": outcome.timed_out,
                }
                for outcome in self.outcomes
            ],
        }
