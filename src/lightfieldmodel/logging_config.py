from __future__ import annotations

import logging
import sys

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: int = logging.INFO, fmt: str = DEFAULT_FORMAT, *, debug: bool = False) -> None:
    """Configure the root logger once per entry point (stderr only)."""
    if debug:
        level = logging.DEBUG
    logging.basicConfig(level=level, format=fmt, handlers=[logging.StreamHandler(sys.stderr)], force=True)
