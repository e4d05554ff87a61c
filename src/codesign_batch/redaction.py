"""Secret masking for every message that leaves a signing run."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from codesign_batch.models import SigningRequest

MASK = "********"


@dataclass(frozen=True)
class Redactor:
    """Ordered (secret, mask) pairs applied to text before it is logged.

    Replacements run in order on the progressively masked string, so a secret
    that is a substring of another, still unmasked, secret is masked where it
    occurs inside that secret too.
    """

    pairs: tuple[tuple[str, str], ...] = ()

    @classmethod
    def for_secrets(cls, *secrets: str | None, mask: str = MASK) -> Redactor:
        """Build a redactor from secrets in replacement order, skipping empty ones."""
        return cls(tuple((secret, mask) for secret in secrets if secret))

    @classmethod
    def from_request(cls, request: SigningRequest) -> Redactor:
        """Mask username, password, credential id and TOTP secret, in that order."""
        return cls.for_secrets(
            request.username,
            request.password,
            request.credential_id,
            request.totp_secret,
        )

    def censor(self, value: object) -> str:
        text = str(value)
        for secret, mask in self.pairs:
            text = text.replace(secret, mask)
        return text

    def format(self, message: str, *args: object) -> str:
        """Censor a %-style template and its arguments, then format."""
        template = self.censor(message)
        if not args:
            return template
        return template % tuple(self.censor(arg) for arg in args)
