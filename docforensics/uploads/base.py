from abc import ABC, abstractmethod

from docforensics.uploads.models import ChunkReceipt, UploadInfo


class BaseChunkStore(ABC):
    """Contract for chunked-upload reassembly stores.

    Implementations must be safe for concurrent use: operations on different
    upload IDs must not contend, and operations on the same ID are serialized.
    """

    @abstractmethod
    def init_upload(
        self,
        upload_id: str,
        filename: str,
        total_chunks: int,
        total_size: int,
    ) -> None:
        """Register a new upload.

        Raises:
            DuplicateUploadError: if ``upload_id`` is already live.
            ValueError: if ``total_chunks`` is not positive.
        """

    @abstractmethod
    def has_upload(self, upload_id: str) -> bool:
        """Return True if ``upload_id`` is registered and not yet deleted."""

    @abstractmethod
    def add_chunk(self, upload_id: str, index: int, data: bytes) -> ChunkReceipt:
        """Store fragment ``index``. Re-sending a known index is a no-op.

        Raises:
            UnknownUploadError: if ``upload_id`` is not registered.
            IndexOutOfRangeError: if ``index`` is outside [0, total_chunks).
            UploadTooLargeError: if the fragment would push the bytes
                received past the declared ``total_size``.
        """

    @abstractmethod
    def assemble(self, upload_id: str) -> bytes:
        """Concatenate all fragments in index order.

        Raises:
            UnknownUploadError: if ``upload_id`` is not registered.
            IncompleteUploadError: if any index is missing.
        """

    @abstractmethod
    def get_info(self, upload_id: str) -> UploadInfo:
        """Return upload metadata.

        Raises:
            UnknownUploadError: if ``upload_id`` is not registered.
        """

    @abstractmethod
    def delete(self, upload_id: str) -> None:
        """Remove an upload and its fragments. Unknown IDs are ignored."""

    @abstractmethod
    def hold(self, upload_id: str, seconds: float) -> None:
        """Keep the upload from expiring for ``seconds`` plus the TTL.

        Any later fragment receipt or assembly restarts the normal TTL clock.

        Raises:
            UnknownUploadError: if ``upload_id`` is not registered.
        """

    @abstractmethod
    def sweep_expired(self, now: float | None = None) -> list[str]:
        """Delete uploads idle for longer than the TTL; return their IDs."""
