from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.agents.orchestrator import ResearchOrchestrator
from app.api.routes import jobs, people, progress
from app.config import Settings, settings as default_settings
from app.models.schemas import HealthResponse
from app.services import logger as log_service
from app.services.entity_store import EntityStore
from app.services.job_queue import JobQueue
from app.tools.search_provider import SearchProvider, get_search_provider


def create_app(
    settings: Settings | None = None,
    *,
    store: EntityStore | None = None,
    search: SearchProvider | None = None,
) -> FastAPI:
    """Build the API with its own store, orchestrator and job queue."""
    settings = settings or default_settings

    if store is None:
        store = EntityStore()
        if settings.seed_demo_data:
            store.seed_demo_data()

    orchestrator = ResearchOrchestrator(
        store,
        search or get_search_provider(settings),
        max_iterations=settings.research_max_iterations,
        top_results=settings.research_top_results,
    )
    job_queue = JobQueue(orchestrator)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        job_queue.start()
        log_service.log_event(event_type="startup", message="Job queue worker started")
        yield
        # Shutdown
        await job_queue.stop()
        log_service.log_event(event_type="shutdown", message="Job queue worker stopped")

    app = FastAPI(
        title="Prospect Research",
        description="Prospect research dashboard API with an iterative enrichment pipeline",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.job_queue = job_queue

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routes
    app.include_router(people.router)
    app.include_router(jobs.router)
    app.include_router(progress.router)

    @app.get("/api/health", response_model=HealthResponse)
    async def health():
        return {
            "status": "ok",
            "service": "prospect-research",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    return app


app = create_app()
