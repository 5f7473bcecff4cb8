from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from linkimport.routes.api import router as api_router
from linkimport.startup import configure_logging


@asynccontextmanager
async def _lifespan(_app: FastAPI):
    configure_logging()
    yield


app = FastAPI(title="linkimport", lifespan=_lifespan)
app.include_router(api_router)
