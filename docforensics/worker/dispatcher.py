import threading
from concurrent.futures import Future, ThreadPoolExecutor

from docforensics.logging.logger import Log
from docforensics.processor.models import JobRequest
from docforensics.worker.exceptions import QueueFullError
from docforensics.worker.job_runner import JobRunner


class JobDispatcher:
    """Runs jobs on a bounded worker pool.

    At most ``max_workers`` jobs run at once and at most ``queue_size`` more
    wait for a worker; beyond that ``submit`` refuses the job.
    """

    def __init__(self, job_runner: JobRunner, max_workers: int, queue_size: int) -> None:
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        if queue_size < 0:
            raise ValueError(f"queue_size must be >= 0, got {queue_size}")
        self._job_runner = job_runner
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="job-worker"
        )
        self._slots = threading.BoundedSemaphore(max_workers + queue_size)

    def submit(self, job_id: str, request: JobRequest) -> Future:
        if not self._slots.acquire(blocking=False):
            raise QueueFullError("Too many jobs in progress, try again later")
        try:
            future = self._executor.submit(self._job_runner.run, job_id, request)
        except RuntimeError:
            self._slots.release()
            raise
        future.add_done_callback(self._release)
        Log.debug(f"Job {job_id} dispatched")
        return future

    def _release(self, _future: Future) -> None:
        self._slots.release()

    def shutdown(self, wait: bool = True) -> None:
        Log.info("Job dispatcher shutting down")
        self._executor.shutdown(wait=wait)
