"""Root logger setup for the API process and the scripts."""
from __future__ import annotations

import logging

from backend.app.core.config import settings

_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"


def setup_logging(level: str | None = None) -> None:
    """Configure the root logger once with a single stream handler."""
    root = logging.getLogger()
    root.setLevel((level or settings.LOG_LEVEL).upper())
    if any(getattr(h, "_ledger_handler", False) for h in root.handlers):
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    handler._ledger_handler = True  # type: ignore[attr-defined]
    root.addHandler(handler)
