import uvicorn
from fastapi import FastAPI

from docforensics.api.app import create_app
from docforensics.config.settings import Settings
from docforensics.database.connection import close_pool, init_pool
from docforensics.jobs.factory import JobStoreFactory
from docforensics.logging.logger import Log
from docforensics.processor.processor import build_processor
from docforensics.uploads.factory import ChunkStoreFactory
from docforensics.worker.dispatcher import JobDispatcher
from docforensics.worker.job_runner import JobRunner
from docforensics.worker.sweeper import ChunkSweeper

DURABLE_BACKENDS = {"postgres"}


def uses_database(settings: Settings) -> bool:
    return bool(
        {settings.chunk_store_backend.lower(), settings.job_store_backend.lower()}
        & DURABLE_BACKENDS
    )


def build_app(settings: Settings) -> FastAPI:
    """Wire stores, processor, worker pool and sweeper into the HTTP app."""
    chunk_store = ChunkStoreFactory.create(settings)
    job_store = JobStoreFactory.create(settings)
    processor = build_processor(settings, chunk_store, job_store)
    job_runner = JobRunner(processor, job_store)
    dispatcher = JobDispatcher(
        job_runner,
        max_workers=settings.worker_max_workers,
        queue_size=settings.worker_queue_size,
    )
    sweeper = ChunkSweeper(chunk_store, settings.chunk_sweep_interval_seconds)
    return create_app(settings, chunk_store, job_store, dispatcher, sweeper)


def main() -> None:
    """Entry point: configure logging -> open pool -> build app -> serve."""
    settings = Settings()
    Log.configure(settings.log_level)
    if uses_database(settings):
        init_pool(settings)

    try:
        app = build_app(settings)
        uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_level="info")
    finally:
        close_pool()


if __name__ == "__main__":
    main()
