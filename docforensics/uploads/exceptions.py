class ChunkStoreError(Exception):
    """Base exception for chunked-upload errors."""


class DuplicateUploadError(ChunkStoreError):
    """Raised when an upload ID is registered twice while still live."""


class UnknownUploadError(ChunkStoreError):
    """Raised when an operation references an upload ID that does not exist."""


class IndexOutOfRangeError(ChunkStoreError):
    """Raised when a chunk index falls outside [0, total_chunks)."""


class IncompleteUploadError(ChunkStoreError):
    """Raised when assembly is requested before every chunk has arrived."""


class ChunkTooLargeError(ChunkStoreError):
    """Raised when a single fragment exceeds the configured maximum size."""


class UploadTooLargeError(ChunkStoreError):
    """Raised when the declared total size exceeds the configured maximum."""
