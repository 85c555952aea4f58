from docforensics.config.settings import Settings
from docforensics.indexing.search import search_tree
from docforensics.indexing.serialization import deserialize_tree
from docforensics.jobs.base import BaseJobStore
from docforensics.jobs.exceptions import JobNotFoundError
from docforensics.jobs.models import Job, job_status_payload
from docforensics.logging.logger import Log
from docforensics.processor.exceptions import FileTooLargeError, NoFileProvidedError
from docforensics.processor.models import JobRequest, parse_ranges
from docforensics.uploads.base import BaseChunkStore
from docforensics.uploads.exceptions import (
    ChunkTooLargeError,
    DuplicateUploadError,
    IndexOutOfRangeError,
    UnknownUploadError,
    UploadTooLargeError,
)
from docforensics.uploads.models import ChunkReceipt
from docforensics.worker.dispatcher import JobDispatcher
from docforensics.worker.exceptions import QueueFullError

SEARCH_CONTENT_PREVIEW_CHARS = 500
DEFAULT_FILENAME = "document.pdf"


class UploadService:
    """Accepts chunked-upload fragments and enforces the upload limits."""

    def __init__(self, chunk_store: BaseChunkStore, settings: Settings) -> None:
        self._chunk_store = chunk_store
        self._settings = settings

    def receive_chunk(
        self,
        upload_id: str,
        chunk_index: int,
        total_chunks: int,
        total_size: int,
        filename: str,
        data: bytes,
    ) -> ChunkReceipt:
        if len(data) > self._settings.max_chunk_size_bytes:
            raise ChunkTooLargeError(
                f"Chunk too large: {len(data)} bytes (max {self._settings.max_chunk_size_bytes})"
            )
        if total_size > self._settings.max_upload_size_bytes:
            raise UploadTooLargeError(
                f"File too large: {total_size} bytes (max {self._settings.max_upload_size_bytes})"
            )
        if not 0 <= chunk_index < total_chunks:
            raise IndexOutOfRangeError(
                f"Invalid chunkIndex {chunk_index} for totalChunks {total_chunks}"
            )

        if not self._chunk_store.has_upload(upload_id):
            try:
                self._chunk_store.init_upload(upload_id, filename, total_chunks, total_size)
                Log.info(
                    "New upload registered",
                    upload_id=upload_id,
                    total_chunks=total_chunks,
                    total_size=total_size,
                )
            except DuplicateUploadError:
                # Another fragment of the same upload registered it first.
                pass

        receipt = self._chunk_store.add_chunk(upload_id, chunk_index, data)
        Log.info(
            f"Chunk {chunk_index + 1}/{receipt.total_chunks} received",
            upload_id=upload_id,
            received=receipt.received_chunks,
        )
        if receipt.complete:
            Log.info("All chunks received", upload_id=upload_id)
        return receipt


class JobService:
    """Creates conversion jobs and answers status polls."""

    def __init__(
        self,
        job_store: BaseJobStore,
        chunk_store: BaseChunkStore,
        dispatcher: JobDispatcher,
        settings: Settings,
    ) -> None:
        self._job_store = job_store
        self._chunk_store = chunk_store
        self._dispatcher = dispatcher
        self._settings = settings

    def start_job(
        self,
        *,
        filename: str | None = None,
        file_bytes: bytes | None = None,
        upload_id: str | None = None,
        ranges: str | None = None,
    ) -> Job:
        """Validate the request, create a pending job and hand it to the workers.

        Returns immediately; processing happens in the background.
        """
        extraction_ranges = parse_ranges(ranges)
        if file_bytes is not None:
            if len(file_bytes) > self._settings.max_upload_size_bytes:
                raise FileTooLargeError(
                    f"File too large: {len(file_bytes)} bytes "
                    f"(max {self._settings.max_upload_size_bytes})"
                )
            upload_id = None
        elif upload_id:
            if not self._chunk_store.has_upload(upload_id):
                raise UnknownUploadError(f"Upload {upload_id} not found or expired")
            # The job may wait in the queue; the sweep must not take its input.
            self._chunk_store.hold(upload_id, self._settings.job_lease_seconds)
            filename = filename or self._chunk_store.get_info(upload_id).filename
        else:
            raise NoFileProvidedError("No file or uploadId provided")

        job = self._job_store.create(filename or DEFAULT_FILENAME)
        request = JobRequest(
            filename=job.filename,
            file_bytes=file_bytes,
            upload_id=upload_id,
            ranges=extraction_ranges,
        )
        try:
            self._dispatcher.submit(job.id, request)
        except QueueFullError as exc:
            self._job_store.mark_failed(job.id, str(exc))
            raise
        Log.info(f"Job {job.id} queued", document=job.filename, ranges=len(extraction_ranges))
        return job

    def status(self, job_id: str) -> dict:
        job = self._job_store.get(job_id)
        if job is None:
            raise JobNotFoundError(f"Job {job_id} not found")
        return job_status_payload(job)


def search_page_index(tree_serialized: str, query: str, max_results: int) -> list[dict]:
    """Search a serialized page index and format the hits for the client.

    Raises:
        InvalidTreeFormatError: if ``tree_serialized`` is not a valid tree.
    """
    tree = deserialize_tree(tree_serialized)
    return [
        {
            "id": node.id,
            "title": node.title,
            "level": node.level,
            "content": node.content[:SEARCH_CONTENT_PREVIEW_CHARS],
            "type": node.metadata.type,
            "page": node.metadata.page,
            "case_number": node.metadata.case_number,
        }
        for node in search_tree(tree, query, max_results)
    ]
