from __future__ import annotations

from fastapi import APIRouter

from . import imports, system
from .utils import preview_payload, row_result_payload, run_payload

router = APIRouter()
router.include_router(system.router)
router.include_router(imports.router)

__all__ = [
    "router",
    "preview_payload",
    "row_result_payload",
    "run_payload",
]
