from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class JobStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Job:
    """One document-processing request tracked end-to-end.

    ``result_data`` is set only when completed, ``error_message`` only when failed.
    """

    id: str
    filename: str
    status: JobStatus = JobStatus.PENDING
    total_pages: int = 0
    processed_pages: int = 0
    current_step: str = "Queued"
    result_data: dict[str, Any] | None = None
    error_message: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


def job_status_payload(job: Job) -> dict[str, Any]:
    """Render a job for the polling client."""
    return {
        "status": job.status.value,
        "step": job.current_step,
        "progress": {"total": job.total_pages, "current": job.processed_pages},
        "result": job.result_data if job.status is JobStatus.COMPLETED else None,
        "error": job.error_message if job.status is JobStatus.FAILED else None,
    }
