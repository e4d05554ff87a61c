"""Module entrypoint for `python -m codesign_batch`."""

from __future__ import annotations

from codesign_batch.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
