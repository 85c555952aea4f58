"""FastAPI application factory."""
from contextlib import asynccontextmanager

from fastapi import FastAPI

from docforensics.api.errors import register_error_handlers
from docforensics.api.routes import jobs, pageindex, uploads
from docforensics.api.services import JobService, UploadService
from docforensics.config.settings import Settings
from docforensics.jobs.base import BaseJobStore
from docforensics.logging.logger import Log
from docforensics.uploads.base import BaseChunkStore
from docforensics.worker.dispatcher import JobDispatcher
from docforensics.worker.sweeper import ChunkSweeper


def create_app(
    settings: Settings,
    chunk_store: BaseChunkStore,
    job_store: BaseJobStore,
    dispatcher: JobDispatcher,
    sweeper: ChunkSweeper | None = None,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        stale = job_store.fail_stale(settings.job_lease_seconds)
        if stale:
            Log.warning(f"Failed {len(stale)} job(s) interrupted by a previous run")
        if sweeper is not None:
            sweeper.start()
        Log.info("docforensics API started", env=settings.app_env)
        yield
        Log.info("docforensics API shutting down")
        if sweeper is not None:
            sweeper.stop()
        dispatcher.shutdown(wait=False)

    app = FastAPI(
        title="docforensics",
        description="PDF to Markdown conversion with forensic validation",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.upload_service = UploadService(chunk_store, settings)
    app.state.job_service = JobService(job_store, chunk_store, dispatcher, settings)
    register_error_handlers(app)

    @app.get("/health")
    def health_check() -> dict[str, str]:
        return {"status": "healthy", "service": "docforensics"}

    app.include_router(uploads.router)
    app.include_router(jobs.router)
    app.include_router(pageindex.router)
    return app
