"""Request and response models of the HTTP API."""
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ChunkReceiptResponse(_WireModel):
    upload_id: str = Field(alias="uploadId")
    received_chunks: int = Field(alias="receivedChunks")
    total_chunks: int = Field(alias="totalChunks")
    complete: bool


class JobCreatedResponse(_WireModel):
    job_id: str = Field(alias="jobId")


class JobProgress(BaseModel):
    total: int
    current: int


class JobStatusResponse(BaseModel):
    status: str
    step: str
    progress: JobProgress
    result: dict[str, Any] | None = None
    error: str | None = None


class SearchRequest(BaseModel):
    tree_serialized: str = Field(min_length=1)
    query: str = Field(min_length=1)
    max_results: int = Field(default=5, ge=1, le=100)


class SearchResultItem(BaseModel):
    id: str
    title: str
    level: int
    content: str
    type: str
    page: int | None = None
    case_number: str | None = None


class SearchResponse(BaseModel):
    query: str
    results_count: int
    results: list[SearchResultItem]


class DownloadExtractionRequest(BaseModel):
    name: str = Field(min_length=1)
    markdown: str = Field(min_length=1)


class ErrorResponse(BaseModel):
    error: str


class SummaryRequest(BaseModel):
    tree_serialized: str = Field(min_length=1)


class SummaryResponse(BaseModel):
    summary: str
    toc: str
