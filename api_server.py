from __future__ import annotations  # FastAPI server exposing the interview session service

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import candidate_router, dashboard_router, get_controller
from config.settings import settings
from storage.migrate import migrate


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:  # Schema on startup, park the live session on shutdown
    migrate(settings.DB_PATH)
    try:
        yield
    finally:
        if get_controller.cache_info().currsize:
            parked = get_controller().suspend()
            logger.info("Shutdown: live session parked=%s", parked)


app = FastAPI(title="Mock Interview API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"]
)
app.include_router(candidate_router)
app.include_router(dashboard_router)


@app.get("/api/health")
def health() -> dict[str, str]:  # Liveness check
    return {"status": "ok"}
