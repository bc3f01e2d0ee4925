"""Upload API routes."""

import logging
from typing import Optional, Union

from fastapi import APIRouter, Depends, File, Form, UploadFile

from pdfqr.api.deps import get_base_url, get_orchestrator, require_access
from pdfqr.core.exceptions import PdfQrError, UnexpectedError
from pdfqr.models.upload import (
    ChunkCompleteResponse,
    ChunkProgressResponse,
    ErrorResponse,
    UploadResponse,
)
from pdfqr.services.orchestrator import ChunkComplete, UploadOrchestrator

router = APIRouter(
    prefix="/api",
    tags=["upload"],
    dependencies=[Depends(require_access)],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        504: {"model": ErrorResponse},
    },
)
logger = logging.getLogger(__name__)


@router.post(
    "/upload-chunk",
    response_model=Union[ChunkCompleteResponse, ChunkProgressResponse],
)
async def upload_chunk(
    chunk: Optional[UploadFile] = File(None),
    chunk_index: Optional[str] = Form(None, alias="chunkIndex"),
    total_chunks: Optional[str] = Form(None, alias="totalChunks"),
    file_name: Optional[str] = Form(None, alias="fileName"),
    file_type: Optional[str] = Form(None, alias="fileType"),
    upload_id: Optional[str] = Form(None, alias="uploadId"),
    orchestrator: UploadOrchestrator = Depends(get_orchestrator),
    base_url: str = Depends(get_base_url),
) -> Union[ChunkCompleteResponse, ChunkProgressResponse]:
    """Receive one chunk of a file split by the client."""
    try:
        chunk_bytes = await chunk.read() if chunk is not None else None

        result = await orchestrator.receive_chunk(
            upload_id=upload_id,
            chunk_index=chunk_index,
            total_chunks=total_chunks,
            file_name=file_name,
            file_type=file_type,
            chunk=chunk_bytes,
            base_url=base_url,
        )

        if isinstance(result, ChunkComplete):
            return ChunkCompleteResponse(
                url=result.artifact.url,
                file_name=result.file_name,
                file_size=result.file_size,
                file_id=result.artifact.artifact_id,
            )
        return ChunkProgressResponse(received=result.received, total=result.total)

    except PdfQrError:
        raise
    except Exception as e:
        logger.error(f"Chunk upload error: {e}", exc_info=True)
        raise UnexpectedError(f"Chunk upload failed: {e}") from e


@router.post("/upload", response_model=UploadResponse)
async def upload_file(
    file: Optional[UploadFile] = File(None),
    orchestrator: UploadOrchestrator = Depends(get_orchestrator),
    base_url: str = Depends(get_base_url),
) -> UploadResponse:
    """Upload a whole PDF in one request."""
    try:
        result = await orchestrator.upload_single(
            file_name=file.filename if file is not None else None,
            mime_type=file.content_type if file is not None else None,
            file_data=file.file if file is not None else None,
            base_url=base_url,
        )

        return UploadResponse(
            url=result.artifact.url,
            file_name=result.file_name,
            file_size=result.file_size,
            upload_time=result.upload_time,
            file_id=result.artifact.artifact_id,
        )

    except PdfQrError:
        raise
    except Exception as e:
        logger.error(f"Upload failed: {e}", exc_info=True)
        raise UnexpectedError(f"Upload failed: {e}") from e
