from docforensics.config.settings import Settings
from docforensics.database.repositories.chunk_repository import PostgresChunkStore
from docforensics.uploads.base import BaseChunkStore
from docforensics.uploads.memory_store import MemoryChunkStore


class ChunkStoreFactory:
    """Creates the chunk store selected by ``chunk_store_backend``."""

    BACKENDS: dict[str, type[BaseChunkStore]] = {
        "memory": MemoryChunkStore,
        "postgres": PostgresChunkStore,
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseChunkStore:
        backend = settings.chunk_store_backend.lower()
        store_cls = cls.BACKENDS.get(backend)
        if store_cls is None:
            raise ValueError(
                f"Unknown chunk store backend '{backend}'. Choose from: {list(cls.BACKENDS)}"
            )
        return store_cls(ttl_seconds=settings.chunk_ttl_seconds)
