from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, UploadFile

from docforensics.api.dependencies import get_upload_service
from docforensics.api.schemas import ChunkReceiptResponse
from docforensics.api.services import UploadService

router = APIRouter(tags=["uploads"])


@router.post("/upload-chunk", response_model=ChunkReceiptResponse)
def upload_chunk(
    chunk: Annotated[UploadFile, File()],
    upload_id: Annotated[str, Form(alias="uploadId", min_length=1)],
    chunk_index: Annotated[int, Form(alias="chunkIndex", ge=0)],
    total_chunks: Annotated[int, Form(alias="totalChunks", ge=1)],
    total_size: Annotated[int, Form(alias="totalSize", ge=0)],
    filename: Annotated[str, Form()] = "",
    upload_service: UploadService = Depends(get_upload_service),
) -> ChunkReceiptResponse:
    """Receive one fragment of a chunked upload."""
    data = chunk.file.read()
    receipt = upload_service.receive_chunk(
        upload_id=upload_id,
        chunk_index=chunk_index,
        total_chunks=total_chunks,
        total_size=total_size,
        filename=filename or chunk.filename or "",
        data=data,
    )
    return ChunkReceiptResponse(**receipt.to_dict())
