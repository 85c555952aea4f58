import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from docforensics.indexing.models import PageIndexTree
from docforensics.processor.models import ExtractionResult, JobRequest
from docforensics.processor.planner import ChunkPlanEntry
from docforensics.validation.models import Certificate, ValidationResult


@dataclass(slots=True)
class PipelineContext:
    job_id: str
    request: JobRequest
    started_at: float = field(default_factory=time.monotonic)
    raw_bytes: bytes = b""
    total_pages: int = 0
    plan: list[ChunkPlanEntry] = field(default_factory=list)
    markdown: str = ""
    extractions: list[ExtractionResult] = field(default_factory=list)
    validation: ValidationResult | None = None
    certificate: Certificate | None = None
    tree: PageIndexTree | None = None
    result_data: dict[str, Any] = field(default_factory=dict)


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
