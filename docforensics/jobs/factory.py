from docforensics.config.settings import Settings
from docforensics.database.repositories.job_repository import PostgresJobStore
from docforensics.jobs.base import BaseJobStore
from docforensics.jobs.memory_store import MemoryJobStore


class JobStoreFactory:
    """Creates the job store selected by ``job_store_backend``."""

    BACKENDS: dict[str, type[BaseJobStore]] = {
        "memory": MemoryJobStore,
        "postgres": PostgresJobStore,
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseJobStore:
        backend = settings.job_store_backend.lower()
        store_cls = cls.BACKENDS.get(backend)
        if store_cls is None:
            raise ValueError(
                f"Unknown job store backend '{backend}'. Choose from: {list(cls.BACKENDS)}"
            )
        return store_cls()
