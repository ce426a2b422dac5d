"""
speakcoach — Main Application
FastAPI app for the desktop UI. Mounts the tutor router and CORS.
Owns the shared HTTP client and the service holder for its lifetime.

Run: uvicorn speakcoach.main:app --port 3001
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from speakcoach import __version__
from speakcoach.commands import CommandError, initialize_service
from speakcoach.config import CORS_ORIGINS, GEMINI_API_KEY, LOG_FORMAT, LOG_LEVEL
from speakcoach.routers import tutor
from speakcoach.state.service import ServiceHolder
from speakcoach.tutor.llm import close_http_client, get_http_client

logger = logging.getLogger("speakcoach")


def create_app(http_client: Optional[httpx.AsyncClient] = None) -> FastAPI:
    """Build the app. Pass http_client to route Gemini calls elsewhere (tests)."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup: logging, HTTP client, optional env-key init. Shutdown: close client."""
        logging.basicConfig(
            level=getattr(logging, LOG_LEVEL, logging.INFO),
            format=LOG_FORMAT,
        )
        # httpx logs full request URLs at INFO, and the API key rides in the query
        logging.getLogger("httpx").setLevel(logging.WARNING)

        app.state.http_client = http_client or get_http_client()
        app.state.holder = ServiceHolder()

        if GEMINI_API_KEY:
            try:
                await initialize_service(
                    GEMINI_API_KEY,
                    holder=app.state.holder,
                    http_client=app.state.http_client,
                )
            except CommandError as e:
                logger.error(f"Startup init failed: {e.message}")
        else:
            logger.info("GEMINI_API_KEY not set, waiting for /api/tutor/initialize")

        logger.info("speakcoach ready")
        yield
        if http_client is None:
            await close_http_client()
        logger.info("Shutting down")

    app = FastAPI(
        title="speakcoach",
        description="AI speaking tutor backend",
        version=__version__,
        lifespan=lifespan,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(tutor.router)

    @app.get("/health")
    async def health():
        return {
            "status": "ok",
            "version": __version__,
            "initialized": await app.state.holder.is_initialized(),
        }

    return app


app = create_app()
