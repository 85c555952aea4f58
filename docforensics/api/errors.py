"""Maps domain exceptions to HTTP responses."""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from docforensics.api.schemas import ErrorResponse
from docforensics.indexing.exceptions import InvalidTreeFormatError
from docforensics.jobs.exceptions import JobNotFoundError, JobStoreError
from docforensics.logging.logger import Log
from docforensics.processor.exceptions import (
    FileTooLargeError,
    InvalidRangeError,
    NoFileProvidedError,
    ProcessorError,
)
from docforensics.uploads.exceptions import (
    ChunkStoreError,
    ChunkTooLargeError,
    DuplicateUploadError,
    IncompleteUploadError,
    IndexOutOfRangeError,
    UnknownUploadError,
    UploadTooLargeError,
)
from docforensics.worker.exceptions import QueueFullError

# Checked in order; the first matching class wins.
ERROR_STATUS: list[tuple[type[Exception], int]] = [
    (ChunkTooLargeError, 413),
    (UploadTooLargeError, 413),
    (FileTooLargeError, 413),
    (IndexOutOfRangeError, 400),
    (NoFileProvidedError, 400),
    (InvalidRangeError, 400),
    (InvalidTreeFormatError, 400),
    (UnknownUploadError, 404),
    (JobNotFoundError, 404),
    (DuplicateUploadError, 409),
    (IncompleteUploadError, 409),
    (QueueFullError, 503),
]


def status_for(exc: Exception) -> int:
    for exc_type, status_code in ERROR_STATUS:
        if isinstance(exc, exc_type):
            return status_code
    return 500


async def _domain_error_handler(request: Request, exc: Exception) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        Log.error(f"{request.method} {request.url.path} failed: {exc}")
    else:
        Log.warning(f"{request.method} {request.url.path} rejected: {exc}", status=status_code)
    return JSONResponse(
        status_code=status_code, content=ErrorResponse(error=str(exc)).model_dump()
    )


def register_error_handlers(app: FastAPI) -> None:
    for base in (
        ChunkStoreError,
        JobStoreError,
        ProcessorError,
        InvalidTreeFormatError,
        QueueFullError,
    ):
        app.add_exception_handler(base, _domain_error_handler)
