from dataclasses import dataclass, field


@dataclass
class ChunkUpload:
    """State of one chunked file transfer.

    ``assembled`` is populated only after every index 0..total_chunks-1 has
    been received and ``assemble`` has run.
    """

    upload_id: str
    filename: str
    total_chunks: int
    total_size: int
    created_at: float
    last_activity_at: float
    chunks: dict[int, bytes] = field(default_factory=dict)
    received_bytes: int = 0
    assembled: bytes | None = None

    @property
    def received_count(self) -> int:
        if self.assembled is not None:
            return self.total_chunks
        return len(self.chunks)

    @property
    def complete(self) -> bool:
        return self.received_count == self.total_chunks

    def missing_indices(self) -> list[int]:
        if self.assembled is not None:
            return []
        return [i for i in range(self.total_chunks) if i not in self.chunks]


@dataclass(frozen=True)
class ChunkReceipt:
    """Result of receiving one fragment."""

    upload_id: str
    received_chunks: int
    total_chunks: int
    complete: bool

    def to_dict(self) -> dict[str, object]:
        return {
            "uploadId": self.upload_id,
            "receivedChunks": self.received_chunks,
            "totalChunks": self.total_chunks,
            "complete": self.complete,
        }


@dataclass(frozen=True)
class UploadInfo:
    """Descriptive metadata for an upload, without its fragments."""

    upload_id: str
    filename: str
    total_chunks: int
    total_size: int
    received_chunks: int
