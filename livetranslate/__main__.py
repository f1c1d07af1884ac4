"""Module entrypoint for running livetranslate as ``python -m livetranslate``."""

from __future__ import annotations

from livetranslate.cli import main


if __name__ == "__main__":
    main()
