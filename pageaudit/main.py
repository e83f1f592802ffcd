"""
Page Audit Service - Main Application Entry Point
FastAPI application with lifespan management.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from pageaudit.api.v1.routes import analyze, health
from pageaudit.core.config import get_settings
from pageaudit.core.logging import configure_logging
from pageaudit.engines.base import ScoringPolicy
from pageaudit.engines.fetcher.engine import PageFetcher, build_http_client
from pageaudit.engines.scoring.engine import ScoringEngine
from pageaudit.reporting.aggregator import ReportAggregator
from pageaudit.reporting.grammar import build_grammar_checker
from pageaudit.reporting.narrative import build_llm_client, build_narrative_generator
from pageaudit.services.analysis import AnalysisService

logger = structlog.get_logger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Manage application lifecycle: startup and shutdown."""
    configure_logging(settings)
    logger.info("Starting Page Audit Service", version=settings.APP_VERSION, env=settings.ENV)

    http_client = build_http_client(settings)
    llm_client = build_llm_client(settings)
    narrative_generator = build_narrative_generator(settings, llm_client)
    grammar_checker = build_grammar_checker(settings, llm_client)

    app.state.analysis_service = AnalysisService(
        fetcher=PageFetcher(http_client, timeout=settings.FETCH_TIMEOUT),
        aggregator=ReportAggregator(
            narrative_generator=narrative_generator,
            grammar_checker=grammar_checker,
        ),
        scoring_engine=ScoringEngine(ScoringPolicy.from_settings(settings)),
    )
    logger.info(
        "Analysis service ready",
        narrative_enabled=narrative_generator is not None,
        grammar_enabled=grammar_checker is not None,
    )

    yield

    # Graceful shutdown
    await http_client.aclose()
    # Narrative and grammar share one client
    if llm_client is not None:
        await llm_client.close()
    logger.info("Application shutdown complete")


def create_application() -> FastAPI:
    app = FastAPI(
        title="Page Audit API",
        description="Single-page quality reports: extracted signals, heuristic scores and narrative.",
        version=settings.APP_VERSION,
        docs_url="/docs" if settings.ENV != "production" else None,
        redoc_url="/redoc" if settings.ENV != "production" else None,
        lifespan=lifespan,
    )

    # Middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials="*" not in settings.CORS_ORIGINS,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    # Routers
    app.include_router(health.router, prefix="/health", tags=["Health"])
    app.include_router(analyze.router, prefix="/api/v1/analyze", tags=["Analysis"])

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled exception", path=request.url.path, error=str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "request_id": request.headers.get("x-request-id")},
        )

    return app


app = create_application()
