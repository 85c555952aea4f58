from abc import ABC, abstractmethod
from typing import Any

from docforensics.jobs.exceptions import InvalidTransitionError
from docforensics.jobs.models import Job, JobStatus

ALLOWED_TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.PENDING: frozenset({JobStatus.PROCESSING, JobStatus.FAILED}),
    JobStatus.PROCESSING: frozenset({JobStatus.COMPLETED, JobStatus.FAILED}),
    JobStatus.COMPLETED: frozenset(),
    JobStatus.FAILED: frozenset(),
}


def check_transition(job_id: str, current: JobStatus, target: JobStatus) -> None:
    """Raise InvalidTransitionError unless ``current -> target`` is allowed."""
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransitionError(
            f"Job {job_id}: cannot move from {current.value} to {target.value}"
        )


class BaseJobStore(ABC):
    """Contract for persisted job state machines.

    Only the processing pipeline mutates jobs; pollers call ``get``.
    """

    @abstractmethod
    def create(self, filename: str) -> Job:
        """Create a pending job with a generated ID."""

    @abstractmethod
    def get(self, job_id: str) -> Job | None:
        """Return a snapshot of the job, or None if unknown."""

    @abstractmethod
    def mark_processing(self, job_id: str, step: str) -> None:
        """Move a pending job to processing.

        Raises:
            JobNotFoundError: if the job does not exist.
            InvalidTransitionError: if the job is not pending.
        """

    @abstractmethod
    def update_progress(
        self,
        job_id: str,
        *,
        step: str | None = None,
        total_pages: int | None = None,
        processed_pages: int | None = None,
    ) -> None:
        """Update progress fields of a processing job.

        ``processed_pages`` never decreases; a lower value is ignored.
        Terminal jobs are left untouched.
        """

    @abstractmethod
    def mark_completed(self, job_id: str, result_data: dict[str, Any]) -> None:
        """Move a processing job to completed and attach its result."""

    @abstractmethod
    def mark_failed(self, job_id: str, error_message: str) -> None:
        """Move a pending or processing job to failed. No result is written."""

    @abstractmethod
    def fail_stale(self, lease_seconds: float) -> list[str]:
        """Fail non-terminal jobs not updated within ``lease_seconds``.

        Returns the IDs of the jobs that were failed.
        """
