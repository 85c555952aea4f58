import threading

from psycopg.rows import dict_row

from docforensics.database.connection import get_connection
from docforensics.logging.logger import Log
from docforensics.uploads.base import BaseChunkStore
from docforensics.uploads.exceptions import (
    DuplicateUploadError,
    IncompleteUploadError,
    IndexOutOfRangeError,
    UnknownUploadError,
    UploadTooLargeError,
)
from docforensics.uploads.models import ChunkReceipt, UploadInfo

_SCHEMA = """
CREATE TABLE IF NOT EXISTS chunk_uploads (
    upload_id TEXT PRIMARY KEY,
    filename TEXT NOT NULL,
    total_chunks INTEGER NOT NULL,
    total_size BIGINT NOT NULL,
    received_bytes BIGINT NOT NULL DEFAULT 0,
    created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP,
    last_activity_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
);
CREATE TABLE IF NOT EXISTS file_chunks (
    upload_id TEXT NOT NULL REFERENCES chunk_uploads (upload_id) ON DELETE CASCADE,
    chunk_index INTEGER NOT NULL,
    data BYTEA NOT NULL,
    created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP,
    PRIMARY KEY (upload_id, chunk_index)
);
ALTER TABLE chunk_uploads ADD COLUMN IF NOT EXISTS received_bytes BIGINT NOT NULL DEFAULT 0;
"""


class PostgresChunkStore(BaseChunkStore):
    """Durable chunk store on the chunk_uploads / file_chunks tables.

    Same-upload writers are serialized by locking the chunk_uploads row;
    a fragment index that is already stored is skipped, so retries are no-ops,
    and the running byte total may never exceed the declared size.
    """

    def __init__(self, ttl_seconds: float = 600) -> None:
        self._ttl_seconds = ttl_seconds
        self._schema_ready = False
        self._schema_lock = threading.Lock()

    def ensure_schema(self) -> None:
        """Create the tables on first use."""
        if self._schema_ready:
            return
        with self._schema_lock:
            if self._schema_ready:
                return
            with get_connection() as conn:
                conn.execute(_SCHEMA)
                conn.commit()
            self._schema_ready = True

    def init_upload(
        self,
        upload_id: str,
        filename: str,
        total_chunks: int,
        total_size: int,
    ) -> None:
        if total_chunks <= 0:
            raise ValueError(f"total_chunks must be positive, got {total_chunks}")
        self.ensure_schema()
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO chunk_uploads (upload_id, filename, total_chunks, total_size)
                    VALUES (%s, %s, %s, %s)
                    ON CONFLICT (upload_id) DO NOTHING
                    """,
                    (upload_id, filename, total_chunks, total_size),
                )
                inserted = cur.rowcount
            conn.commit()
        if inserted == 0:
            raise DuplicateUploadError(f"Upload {upload_id} already exists")
        Log.info(
            f"New upload {upload_id}: {total_chunks} chunks, {total_size} bytes",
            upload_id=upload_id,
        )

    def has_upload(self, upload_id: str) -> bool:
        self.ensure_schema()
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "SELECT 1 FROM chunk_uploads WHERE upload_id = %s",
                    (upload_id,),
                )
                return cur.fetchone() is not None

    def add_chunk(self, upload_id: str, index: int, data: bytes) -> ChunkReceipt:
        self.ensure_schema()
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT total_chunks, total_size, received_bytes FROM chunk_uploads
                    WHERE upload_id = %s
                    FOR UPDATE
                    """,
                    (upload_id,),
                )
                row = cur.fetchone()
                if row is None:
                    conn.rollback()
                    raise UnknownUploadError(f"Upload {upload_id} not found")
                total_chunks = row["total_chunks"]
                if index < 0 or index >= total_chunks:
                    conn.rollback()
                    raise IndexOutOfRangeError(
                        f"Invalid chunk index {index} for {total_chunks} chunks"
                    )
                cur.execute(
                    "SELECT 1 FROM file_chunks WHERE upload_id = %s AND chunk_index = %s",
                    (upload_id, index),
                )
                is_new = cur.fetchone() is None
                if is_new and int(row["received_bytes"]) + len(data) > int(row["total_size"]):
                    conn.rollback()
                    raise UploadTooLargeError(
                        f"Upload {upload_id} would exceed its declared size of "
                        f"{row['total_size']} bytes"
                    )
                received_delta = 0
                if is_new:
                    cur.execute(
                        """
                        INSERT INTO file_chunks (upload_id, chunk_index, data)
                        VALUES (%s, %s, %s)
                        """,
                        (upload_id, index, bytes(data)),
                    )
                    received_delta = len(data)
                cur.execute(
                    """
                    UPDATE chunk_uploads
                    SET last_activity_at = NOW(), received_bytes = received_bytes + %s
                    WHERE upload_id = %s
                    """,
                    (received_delta, upload_id),
                )
                cur.execute(
                    "SELECT COUNT(*) AS received FROM file_chunks WHERE upload_id = %s",
                    (upload_id,),
                )
                count_row = cur.fetchone()
            conn.commit()
        received = int(count_row["received"]) if count_row else 0
        return ChunkReceipt(
            upload_id=upload_id,
            received_chunks=received,
            total_chunks=total_chunks,
            complete=received == total_chunks,
        )

    def assemble(self, upload_id: str) -> bytes:
        self.ensure_schema()
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    "SELECT total_chunks FROM chunk_uploads WHERE upload_id = %s",
                    (upload_id,),
                )
                row = cur.fetchone()
                if row is None:
                    raise UnknownUploadError(f"Upload {upload_id} not found")
                total_chunks = row["total_chunks"]
                cur.execute(
                    """
                    SELECT chunk_index, LENGTH(data) AS size
                    FROM file_chunks
                    WHERE upload_id = %s
                    ORDER BY chunk_index
                    """,
                    (upload_id,),
                )
                sizes = {r["chunk_index"]: int(r["size"]) for r in cur.fetchall()}
            missing = [i for i in range(total_chunks) if i not in sizes]
            if missing:
                raise IncompleteUploadError(
                    f"Upload {upload_id} is missing chunks {missing} "
                    f"({len(sizes)}/{total_chunks} received)"
                )

            # Fetch one fragment at a time into a pre-sized buffer.
            buffer = bytearray(sum(sizes[i] for i in range(total_chunks)))
            offset = 0
            with conn.cursor() as cur:
                for i in range(total_chunks):
                    cur.execute(
                        """
                        SELECT data FROM file_chunks
                        WHERE upload_id = %s AND chunk_index = %s
                        """,
                        (upload_id, i),
                    )
                    chunk_row = cur.fetchone()
                    if chunk_row is None:
                        raise IncompleteUploadError(
                            f"Chunk {i} disappeared from upload {upload_id}"
                        )
                    chunk = chunk_row[0]
                    buffer[offset : offset + len(chunk)] = chunk
                    offset += len(chunk)
                cur.execute(
                    "UPDATE chunk_uploads SET last_activity_at = NOW() WHERE upload_id = %s",
                    (upload_id,),
                )
            conn.commit()
        Log.info(
            f"Upload {upload_id} assembled from {total_chunks} chunks: {offset} bytes",
            upload_id=upload_id,
        )
        return bytes(buffer[:offset])

    def get_info(self, upload_id: str) -> UploadInfo:
        self.ensure_schema()
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT u.filename, u.total_chunks, u.total_size,
                           (SELECT COUNT(*) FROM file_chunks c
                            WHERE c.upload_id = u.upload_id) AS received
                    FROM chunk_uploads u
                    WHERE u.upload_id = %s
                    """,
                    (upload_id,),
                )
                row = cur.fetchone()
        if row is None:
            raise UnknownUploadError(f"Upload {upload_id} not found")
        return UploadInfo(
            upload_id=upload_id,
            filename=row["filename"],
            total_chunks=row["total_chunks"],
            total_size=int(row["total_size"]),
            received_chunks=int(row["received"]),
        )

    def delete(self, upload_id: str) -> None:
        self.ensure_schema()
        with get_connection() as conn:
            conn.execute("DELETE FROM chunk_uploads WHERE upload_id = %s", (upload_id,))
            conn.commit()

    def hold(self, upload_id: str, seconds: float) -> None:
        self.ensure_schema()
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE chunk_uploads
                    SET last_activity_at = GREATEST(
                        last_activity_at, NOW() + make_interval(secs => %s::double precision)
                    )
                    WHERE upload_id = %s
                    """,
                    (seconds, upload_id),
                )
                updated = cur.rowcount
            conn.commit()
        if updated == 0:
            raise UnknownUploadError(f"Upload {upload_id} not found")

    def sweep_expired(self, now: float | None = None) -> list[str]:
        self.ensure_schema()
        with get_connection() as conn:
            with conn.cursor() as cur:
                if now is None:
                    cur.execute(
                        """
                        DELETE FROM chunk_uploads
                        WHERE last_activity_at < NOW() - make_interval(secs => %s)
                        RETURNING upload_id
                        """,
                        (self._ttl_seconds,),
                    )
                else:
                    cur.execute(
                        """
                        DELETE FROM chunk_uploads
                        WHERE last_activity_at < to_timestamp(%s) - make_interval(secs => %s)
                        RETURNING upload_id
                        """,
                        (now, self._ttl_seconds),
                    )
                expired = [row[0] for row in cur.fetchall()]
            conn.commit()
        for upload_id in expired:
            Log.info(f"TTL expired, deleted upload {upload_id}", upload_id=upload_id)
        return expired
