from docforensics.jobs.base import BaseJobStore
from docforensics.logging.logger import Log
from docforensics.processor.models import JobRequest
from docforensics.processor.processor import Processor


class JobRunner:
    """Run one job and record any failure on it."""

    def __init__(self, processor: Processor, job_store: BaseJobStore) -> None:
        self._processor = processor
        self._job_store = job_store

    def run(self, job_id: str, request: JobRequest) -> None:
        """Execute a single job with error handling. Never raises."""
        Log.info(f"Running job {job_id}")
        try:
            self._processor.process(job_id, request)
            Log.info(f"Job {job_id} completed successfully")
        except Exception as exc:
            self._handle_failure(job_id, exc)

    def _handle_failure(self, job_id: str, exc: Exception) -> None:
        message = str(exc) or exc.__class__.__name__
        Log.exception(f"Job {job_id} failed: {message}")
        try:
            self._job_store.mark_failed(job_id, message)
        except Exception as store_exc:
            Log.error(f"Could not mark job {job_id} as failed: {store_exc}")
