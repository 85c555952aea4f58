import threading
import uuid
from typing import Any

from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from docforensics.database.connection import get_connection
from docforensics.jobs.base import BaseJobStore, check_transition
from docforensics.jobs.exceptions import JobNotFoundError
from docforensics.jobs.models import Job, JobStatus
from docforensics.logging.logger import Log

_SCHEMA = """
CREATE TABLE IF NOT EXISTS processing_jobs (
    id UUID PRIMARY KEY,
    status TEXT NOT NULL,
    filename TEXT NOT NULL,
    total_pages INTEGER DEFAULT 0,
    processed_pages INTEGER DEFAULT 0,
    current_step TEXT,
    result_data JSONB,
    error_message TEXT,
    created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
);
"""

_COLUMNS = """
    id, status, filename, total_pages, processed_pages, current_step,
    result_data, error_message, created_at, updated_at
"""


class PostgresJobStore(BaseJobStore):
    """Database operations for the processing_jobs table."""

    def __init__(self) -> None:
        self._schema_ready = False
        self._schema_lock = threading.Lock()

    def ensure_schema(self) -> None:
        """Create the table on first use."""
        if self._schema_ready:
            return
        with self._schema_lock:
            if self._schema_ready:
                return
            with get_connection() as conn:
                conn.execute(_SCHEMA)
                conn.commit()
            self._schema_ready = True

    def create(self, filename: str) -> Job:
        self.ensure_schema()
        job_id = str(uuid.uuid4())
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    INSERT INTO processing_jobs
                        (id, status, filename, current_step, created_at, updated_at)
                    VALUES (%s, 'pending', %s, 'Queued', NOW(), NOW())
                    RETURNING {_COLUMNS}
                    """,
                    (job_id, filename),
                )
                row = cur.fetchone()
            conn.commit()
        if row is None:
            raise RuntimeError(f"Insert of job {job_id} returned no row")
        Log.info(f"Job {job_id} created for {filename}", job_id=job_id)
        return self._to_job(row)

    def get(self, job_id: str) -> Job | None:
        self.ensure_schema()
        try:
            uuid.UUID(job_id)
        except ValueError:
            return None
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM processing_jobs WHERE id = %s",
                    (job_id,),
                )
                row = cur.fetchone()
        if row is None:
            return None
        return self._to_job(row)

    def mark_processing(self, job_id: str, step: str) -> None:
        self._transition(
            job_id,
            JobStatus.PROCESSING,
            """
            UPDATE processing_jobs
            SET status = 'processing', current_step = %s, updated_at = NOW()
            WHERE id = %s
            """,
            (step, job_id),
        )

    def update_progress(
        self,
        job_id: str,
        *,
        step: str | None = None,
        total_pages: int | None = None,
        processed_pages: int | None = None,
    ) -> None:
        self.ensure_schema()
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE processing_jobs
                SET current_step = COALESCE(%s, current_step),
                    total_pages = COALESCE(%s, total_pages),
                    processed_pages = GREATEST(processed_pages, COALESCE(%s, processed_pages)),
                    updated_at = NOW()
                WHERE id = %s
                  AND status NOT IN ('completed', 'failed')
                """,
                (step, total_pages, processed_pages, job_id),
            )
            conn.commit()

    def mark_completed(self, job_id: str, result_data: dict[str, Any]) -> None:
        self._transition(
            job_id,
            JobStatus.COMPLETED,
            """
            UPDATE processing_jobs
            SET status = 'completed', current_step = 'Done', result_data = %s,
                error_message = NULL, updated_at = NOW()
            WHERE id = %s
            """,
            (Jsonb(result_data), job_id),
        )

    def mark_failed(self, job_id: str, error_message: str) -> None:
        self._transition(
            job_id,
            JobStatus.FAILED,
            """
            UPDATE processing_jobs
            SET status = 'failed', current_step = 'Failed', error_message = %s,
                result_data = NULL, updated_at = NOW()
            WHERE id = %s
            """,
            (error_message, job_id),
        )

    def fail_stale(self, lease_seconds: float) -> list[str]:
        self.ensure_schema()
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE processing_jobs
                    SET status = 'failed', current_step = 'Failed',
                        error_message = 'Interrupted by service restart',
                        updated_at = NOW()
                    WHERE status IN ('pending', 'processing')
                      AND updated_at < NOW() - make_interval(secs => %s)
                    RETURNING id
                    """,
                    (lease_seconds,),
                )
                failed = [str(row[0]) for row in cur.fetchall()]
            conn.commit()
        for job_id in failed:
            Log.warning(f"Job {job_id} exceeded its lease and was failed", job_id=job_id)
        return failed

    def _transition(
        self,
        job_id: str,
        target: JobStatus,
        query: str,
        params: tuple[Any, ...],
    ) -> None:
        """Lock the row, validate the move, and apply ``query`` in one transaction."""
        self.ensure_schema()
        with get_connection() as conn:
            try:
                with conn.cursor() as cur:
                    cur.execute(
                        "SELECT status FROM processing_jobs WHERE id = %s FOR UPDATE",
                        (job_id,),
                    )
                    row = cur.fetchone()
                    if row is None:
                        raise JobNotFoundError(f"Job {job_id} not found")
                    check_transition(job_id, JobStatus(row[0]), target)
                    cur.execute(query, params)
                conn.commit()
            except Exception:
                conn.rollback()
                raise

    @staticmethod
    def _to_job(row: dict[str, Any]) -> Job:
        return Job(
            id=str(row["id"]),
            filename=row["filename"],
            status=JobStatus(row["status"]),
            total_pages=row["total_pages"] or 0,
            processed_pages=row["processed_pages"] or 0,
            current_step=row["current_step"] or "",
            result_data=row["result_data"],
            error_message=row["error_message"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
