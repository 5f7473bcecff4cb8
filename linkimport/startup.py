from __future__ import annotations

import logging
import os
from typing import Optional

LOG_FORMAT = "%(levelname)s [%(name)s] %(message)s"


def resolve_log_level(level_name: Optional[str] = None) -> int:
    name = (level_name or os.getenv("LINKIMPORT_LOG_LEVEL") or "INFO").strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level_name: Optional[str] = None) -> int:
    """Configure root logging once per process entry point.

    An explicit ``level_name`` (the CLI's ``--verbose``) wins over
    ``LINKIMPORT_LOG_LEVEL``. Returns the level that was applied.
    """
    level = resolve_log_level(level_name)
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)
    return level
