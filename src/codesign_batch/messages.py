"""Append-only message sink shared by the batch and its reader threads."""

from __future__ import annotations

import logging
import threading

from codesign_batch.models import LogMessage
from codesign_batch.redaction import Redactor

LOGGER = logging.getLogger("codesign_batch.sign")


class MessageLog:
    """Collect redacted info/error messages and forward them to logging."""

    def __init__(self, redactor: Redactor, logger: logging.Logger | None = None) -> None:
        self._redactor = redactor
        self._logger = logger or LOGGER
        self._lock = threading.Lock()
        self._messages: list[LogMessage] = []

    @property
    def redactor(self) -> Redactor:
        return self._redactor

    @property
    def messages(self) -> tuple[LogMessage, ...]:
        with self._lock:
            return tuple(self._messages)

    def info(self, message: str, *args: object, source: object | None = None) -> str:
        return self._emit("info", logging.INFO, message, args, source)

    def error(self, message: str, *args: object, source: object | None = None) -> str:
        return self._emit("error", logging.ERROR, message, args, source)

    def _emit(
        self,
        level: str,
        levelno: int,
        message: str,
        args: tuple[object, ...],
        source: object | None,
    ) -> str:
        text = self._redactor.format(message, *args)
        extra = {"source_file": self._redactor.censor(source)} if source is not None else None
        with self._lock:
            self._messages.append(LogMessage(level=level, text=text))
        self._logger.log(levelno, "%s", text, extra=extra)
        return text
