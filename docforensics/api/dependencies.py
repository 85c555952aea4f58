from fastapi import HTTPException, Request

from docforensics.api.services import JobService, UploadService


def get_upload_service(request: Request) -> UploadService:
    service = getattr(request.app.state, "upload_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Upload service not initialized")
    return service


def get_job_service(request: Request) -> JobService:
    service = getattr(request.app.state, "job_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Job service not initialized")
    return service
