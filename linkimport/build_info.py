from __future__ import annotations

import os
from importlib import metadata

from linkimport.environment import is_docker_runtime


def _get_env_value(name: str, default: str) -> str:
    value = os.getenv(name)
    if not value:
        return default
    return value


def _package_version() -> str:
    try:
        return metadata.version("linkimport")
    except metadata.PackageNotFoundError:
        return "dev"


def get_build_info() -> dict[str, str]:
    version = _get_env_value("LINKIMPORT_VERSION", _package_version())
    commit = _get_env_value("LINKIMPORT_COMMIT", "unknown")
    if version == "dev" and is_docker_runtime() and commit != "unknown":
        version = f"sha-{commit[:7]}"
    return {
        "status": "ok",
        "version": version,
        "commit": commit,
        "build_time": _get_env_value("LINKIMPORT_BUILD_TIME", "unknown"),
    }
