from __future__ import annotations

import json
import logging
from pathlib import Path

from codesign_batch.logging_utils import HumanFormatter, LogOptions, configure_logging


def test_configure_logging_writes_json(tmp_path: Path) -> None:
    log_path = tmp_path / "logs" / "codesign.jsonl"
    configure_logging(LogOptions(log_file=log_path))
    logger = logging.getLogger("codesign_batch.test")
    logger.info("hello", extra={"source_file": "/work/app.exe"})
    logging.shutdown()

    lines = log_path.read_text(encoding="utf-8").strip().splitlines()
    assert lines
    payload = json.loads(lines[-1])
    assert payload["message"] == "hello"
    assert payload["level"] == "info"
    assert payload["extra"]["source_file"] == "/work/app.exe"


def test_human_formatter_prefixes_file_name() -> None:
    formatter = HumanFormatter("%(levelname)s: %(message)s")
    record = logging.LogRecord("x", logging.ERROR, __file__, 1, "boom", None, None)
    record.source_file = "/work/dist/app.exe"

    assert formatter.format(record) == "[app.exe] ERROR: boom"


def test_quiet_console_level() -> None:
    root = configure_logging(LogOptions(quiet=True))
    assert root.handlers[0].level == logging.WARNING
