from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from docforensics.api.dependencies import get_job_service
from docforensics.api.schemas import JobCreatedResponse, JobStatusResponse
from docforensics.api.services import JobService

router = APIRouter(tags=["jobs"])


@router.post(
    "/jobs",
    response_model=JobCreatedResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
def create_job(
    file: Annotated[UploadFile | None, File()] = None,
    upload_id: Annotated[str | None, Form(alias="uploadId")] = None,
    filename: Annotated[str | None, Form()] = None,
    ranges: Annotated[str | None, Form()] = None,
    job_service: JobService = Depends(get_job_service),
) -> JobCreatedResponse:
    """Start converting a directly attached PDF or a completed chunked upload."""
    file_bytes = file.file.read() if file is not None else None
    job = job_service.start_job(
        filename=filename or (file.filename if file is not None else None),
        file_bytes=file_bytes,
        upload_id=upload_id,
        ranges=ranges,
    )
    return JobCreatedResponse(job_id=job.id)


@router.get("/jobs/{job_id}", response_model=JobStatusResponse)
def get_job_status(
    job_id: str,
    job_service: JobService = Depends(get_job_service),
) -> JobStatusResponse:
    return JobStatusResponse(**job_service.status(job_id))
