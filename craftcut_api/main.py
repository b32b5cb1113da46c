from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, Dict

from fastapi import FastAPI

from craftcut_playground.logging_config import setup_logging

from .adapters import sessions as session_adapter
from .routers import sessions as sessions_router


@asynccontextmanager
async def lifespan(_app: FastAPI):
    setup_logging()
    yield


app = FastAPI(
    title="CraftCut API",
    version="0.1.0",
    description="Editing sessions for CraftCut panel layouts",
    lifespan=lifespan,
)

app.include_router(sessions_router.router)


@app.get("/")
async def index() -> Dict[str, Any]:
    return {
        "name": "craftcut-api",
        "version": app.version,
        "routes": [
            {"path": "/sessions", "methods": ["GET", "POST"]},
            {"path": "/sessions/{id}/commands", "methods": ["POST"]},
        ],
        "session_count": len(session_adapter.list_sessions()),
    }
