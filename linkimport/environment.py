from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

_FALSE_VALUES = {"0", "false", "no", "off"}

DEFAULT_CHUNK_SIZE = 100
DEFAULT_UPLOAD_MAX_BYTES = 5 * 1024 * 1024
DEFAULT_SERVICE_TIMEOUT = 30


def _get_int(name: str, default: int, minimum: int = 0) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        return default
    return value if value >= minimum else default


def _get_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() not in _FALSE_VALUES


def get_chunk_size() -> int:
    return _get_int("LINKIMPORT_CHUNK_SIZE", DEFAULT_CHUNK_SIZE, minimum=1)


def get_upload_max_bytes() -> int:
    return _get_int("LINKIMPORT_UPLOAD_MAX_BYTES", DEFAULT_UPLOAD_MAX_BYTES)


def get_service_url() -> Optional[str]:
    value = os.getenv("LINKIMPORT_SERVICE_URL", "").strip()
    return value or None


def get_service_token() -> Optional[str]:
    value = os.getenv("LINKIMPORT_SERVICE_TOKEN", "").strip()
    return value or None


def get_service_timeout() -> int:
    return _get_int("LINKIMPORT_SERVICE_TIMEOUT", DEFAULT_SERVICE_TIMEOUT, minimum=1)


def is_service_insecure() -> bool:
    return _get_flag("LINKIMPORT_SERVICE_INSECURE")


def is_docker_runtime() -> bool:
    override = os.getenv("LINKIMPORT_DOCKER_RUNTIME")
    if override is not None:
        return override.strip().lower() not in _FALSE_VALUES
    return Path("/.dockerenv").exists()
