"""
FastAPI application factory for the content risk service.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.router import router as analysis_router
from orchestrator.core import ContentRiskService


def create_app(service: ContentRiskService) -> FastAPI:
    """Build the app around an already wired service."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await service.close()

    app = FastAPI(
        title="Content Risk Assessment API",
        description="Pre-publication backlash risk scoring, recommendations and explanations.",
        version=service.config.engine_version,
        lifespan=lifespan,
    )
    app.state.service = service

    # CORS (Allow local frontend development)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Restrict in production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(analysis_router)

    @app.get("/")
    def root():
        return {"status": "ok", "message": "Content Risk API is running"}

    return app
