"""Workflow Replay FastAPI backend: main application entry point."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from workflow_replay import config
from workflow_replay.parsers.transcripts import clear_parse_cache
from workflow_replay.routers.workflow import workflow_router

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger("replay")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    logger.info("Workflow replay backend starting up")
    if not config.TRANSCRIPTS_DIR.exists():
        logger.warning(f"Transcripts directory {config.TRANSCRIPTS_DIR} does not exist; no sessions will be listed")
    else:
        logger.info(f"Serving transcripts from {config.TRANSCRIPTS_DIR}")

    yield

    logger.info("Workflow replay backend shutting down")
    clear_parse_cache()


app = FastAPI(
    title="Workflow Replay API",
    description="Transcript reconstruction and replay views for agent sessions",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS: allow the viewer frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        config.FRONTEND_ORIGIN,
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(workflow_router)


@app.get("/api/health")
def health():
    """Health check endpoint."""
    return {
        "status": "ok",
        "transcriptsDir": str(config.TRANSCRIPTS_DIR),
        "transcripts": "available" if config.TRANSCRIPTS_DIR.exists() else "missing",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("workflow_replay.main:app", host=config.HOST, port=config.PORT, reload=False)
