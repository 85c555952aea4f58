import copy
import threading
import uuid
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

from docforensics.jobs.base import BaseJobStore, check_transition
from docforensics.jobs.exceptions import JobNotFoundError
from docforensics.jobs.models import Job, JobStatus, utcnow
from docforensics.logging.logger import Log


class MemoryJobStore(BaseJobStore):
    """Process-local job store. Each job has its own lock."""

    def __init__(self, clock: Callable[[], datetime] = utcnow) -> None:
        self._clock = clock
        self._jobs: dict[str, Job] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def create(self, filename: str) -> Job:
        now = self._clock()
        job = Job(id=str(uuid.uuid4()), filename=filename, created_at=now, updated_at=now)
        with self._registry_lock:
            self._jobs[job.id] = job
            self._locks[job.id] = threading.Lock()
        Log.info(f"Job {job.id} created for {filename}", job_id=job.id)
        return copy.deepcopy(job)

    def get(self, job_id: str) -> Job | None:
        with self._registry_lock:
            job = self._jobs.get(job_id)
            lock = self._locks.get(job_id)
        if job is None or lock is None:
            return None
        with lock:
            return copy.deepcopy(job)

    def mark_processing(self, job_id: str, step: str) -> None:
        job, lock = self._lookup(job_id)
        with lock:
            check_transition(job_id, job.status, JobStatus.PROCESSING)
            job.status = JobStatus.PROCESSING
            job.current_step = step
            job.updated_at = self._clock()

    def update_progress(
        self,
        job_id: str,
        *,
        step: str | None = None,
        total_pages: int | None = None,
        processed_pages: int | None = None,
    ) -> None:
        job, lock = self._lookup(job_id)
        with lock:
            if job.status.terminal:
                return
            if step is not None:
                job.current_step = step
            if total_pages is not None:
                job.total_pages = total_pages
            if processed_pages is not None:
                job.processed_pages = max(job.processed_pages, processed_pages)
            job.updated_at = self._clock()

    def mark_completed(self, job_id: str, result_data: dict[str, Any]) -> None:
        job, lock = self._lookup(job_id)
        with lock:
            check_transition(job_id, job.status, JobStatus.COMPLETED)
            job.status = JobStatus.COMPLETED
            job.current_step = "Done"
            job.result_data = result_data
            job.error_message = None
            job.updated_at = self._clock()

    def mark_failed(self, job_id: str, error_message: str) -> None:
        job, lock = self._lookup(job_id)
        with lock:
            check_transition(job_id, job.status, JobStatus.FAILED)
            job.status = JobStatus.FAILED
            job.current_step = "Failed"
            job.error_message = error_message
            job.result_data = None
            job.updated_at = self._clock()

    def fail_stale(self, lease_seconds: float) -> list[str]:
        cutoff = self._clock() - timedelta(seconds=lease_seconds)
        with self._registry_lock:
            candidates = [
                (job_id, job, self._locks[job_id]) for job_id, job in self._jobs.items()
            ]
        failed: list[str] = []
        for job_id, job, lock in candidates:
            with lock:
                if job.status.terminal or job.updated_at >= cutoff:
                    continue
                job.status = JobStatus.FAILED
                job.current_step = "Failed"
                job.error_message = "Interrupted by service restart"
                job.updated_at = self._clock()
            failed.append(job_id)
            Log.warning(f"Job {job_id} exceeded its lease and was failed", job_id=job_id)
        return failed

    def _lookup(self, job_id: str) -> tuple[Job, threading.Lock]:
        with self._registry_lock:
            job = self._jobs.get(job_id)
            lock = self._locks.get(job_id)
        if job is None or lock is None:
            raise JobNotFoundError(f"Job {job_id} not found")
        return job, lock
