import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from docforensics.logging.logger import Log
from docforensics.uploads.base import BaseChunkStore
from docforensics.uploads.exceptions import (
    DuplicateUploadError,
    IncompleteUploadError,
    IndexOutOfRangeError,
    UnknownUploadError,
    UploadTooLargeError,
)
from docforensics.uploads.models import ChunkReceipt, ChunkUpload, UploadInfo


@dataclass
class _Entry:
    upload: ChunkUpload
    lock: threading.Lock = field(default_factory=threading.Lock)


class MemoryChunkStore(BaseChunkStore):
    """In-process chunk store with per-upload locking and TTL expiry.

    The registry lock only guards dictionary membership; fragment mutation
    happens under the upload's own lock, so uploads never contend with each
    other and the sweep never waits on an in-flight ``add_chunk``.
    """

    def __init__(
        self,
        ttl_seconds: float = 600,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._registry_lock = threading.Lock()

    def init_upload(
        self,
        upload_id: str,
        filename: str,
        total_chunks: int,
        total_size: int,
    ) -> None:
        if total_chunks <= 0:
            raise ValueError(f"total_chunks must be positive, got {total_chunks}")
        now = self._clock()
        upload = ChunkUpload(
            upload_id=upload_id,
            filename=filename,
            total_chunks=total_chunks,
            total_size=total_size,
            created_at=now,
            last_activity_at=now,
        )
        with self._registry_lock:
            if upload_id in self._entries:
                raise DuplicateUploadError(f"Upload {upload_id} already exists")
            self._entries[upload_id] = _Entry(upload=upload)
        Log.info(
            f"New upload {upload_id}: {total_chunks} chunks, {total_size} bytes",
            upload_id=upload_id,
        )

    def has_upload(self, upload_id: str) -> bool:
        with self._registry_lock:
            return upload_id in self._entries

    def add_chunk(self, upload_id: str, index: int, data: bytes) -> ChunkReceipt:
        entry = self._entry(upload_id)
        with entry.lock:
            upload = entry.upload
            if index < 0 or index >= upload.total_chunks:
                raise IndexOutOfRangeError(
                    f"Invalid chunk index {index} for {upload.total_chunks} chunks"
                )
            if upload.assembled is None and index not in upload.chunks:
                if upload.received_bytes + len(data) > upload.total_size:
                    raise UploadTooLargeError(
                        f"Upload {upload_id} would exceed its declared size of "
                        f"{upload.total_size} bytes"
                    )
                upload.chunks[index] = bytes(data)
                upload.received_bytes += len(data)
            upload.last_activity_at = self._clock()
            return ChunkReceipt(
                upload_id=upload_id,
                received_chunks=upload.received_count,
                total_chunks=upload.total_chunks,
                complete=upload.complete,
            )

    def assemble(self, upload_id: str) -> bytes:
        entry = self._entry(upload_id)
        with entry.lock:
            upload = entry.upload
            if upload.assembled is not None:
                return upload.assembled
            missing = upload.missing_indices()
            if missing:
                raise IncompleteUploadError(
                    f"Upload {upload_id} is missing chunks {missing} "
                    f"({upload.received_count}/{upload.total_chunks} received)"
                )
            size = sum(len(chunk) for chunk in upload.chunks.values())
            buffer = bytearray(size)
            offset = 0
            for i in range(upload.total_chunks):
                # Release each fragment as soon as it is copied.
                chunk = upload.chunks.pop(i)
                buffer[offset : offset + len(chunk)] = chunk
                offset += len(chunk)
            upload.assembled = bytes(buffer)
            upload.last_activity_at = self._clock()
        Log.info(
            f"Upload {upload_id} assembled: {len(upload.assembled)} bytes",
            upload_id=upload_id,
        )
        return upload.assembled

    def get_info(self, upload_id: str) -> UploadInfo:
        entry = self._entry(upload_id)
        with entry.lock:
            upload = entry.upload
            return UploadInfo(
                upload_id=upload_id,
                filename=upload.filename,
                total_chunks=upload.total_chunks,
                total_size=upload.total_size,
                received_chunks=upload.received_count,
            )

    def delete(self, upload_id: str) -> None:
        with self._registry_lock:
            self._entries.pop(upload_id, None)

    def hold(self, upload_id: str, seconds: float) -> None:
        entry = self._entry(upload_id)
        with entry.lock:
            upload = entry.upload
            upload.last_activity_at = max(upload.last_activity_at, self._clock() + seconds)

    def sweep_expired(self, now: float | None = None) -> list[str]:
        current = self._clock() if now is None else now
        with self._registry_lock:
            expired = [
                upload_id
                for upload_id, entry in self._entries.items()
                if current - entry.upload.last_activity_at > self._ttl_seconds
            ]
            for upload_id in expired:
                del self._entries[upload_id]
        for upload_id in expired:
            Log.info(f"TTL expired, deleted upload {upload_id}", upload_id=upload_id)
        return expired

    def _entry(self, upload_id: str) -> _Entry:
        with self._registry_lock:
            entry = self._entries.get(upload_id)
        if entry is None:
            raise UnknownUploadError(f"Upload {upload_id} not found")
        return entry
