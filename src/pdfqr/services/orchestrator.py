"""Drives chunked and single-shot uploads from request fields to a stored artifact."""

import logging
import time
from dataclasses import dataclass
from typing import BinaryIO, Optional

from pdfqr.core.exceptions import MalformedRequest, PayloadRejected
from pdfqr.core.logging import upload_id_context
from pdfqr.storage.base import ArtifactSink, StoredArtifact
from pdfqr.storage.session_store import ChunkSessionStore

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"


def format_file_size(size_bytes: int) -> str:
    """Human-readable size in megabytes, e.g. ``"12.3 MB"``."""
    return f"{size_bytes / 1024 / 1024:.1f} MB"


@dataclass(frozen=True)
class ChunkProgress:
    """Chunk accepted, more are expected."""

    received: int
    total: int
    complete: bool = False


@dataclass(frozen=True)
class ChunkComplete:
    """Last chunk accepted, file assembled and stored."""

    artifact: StoredArtifact
    file_name: str
    complete: bool = True

    @property
    def file_size(self) -> str:
        return format_file_size(self.artifact.byte_length)


@dataclass(frozen=True)
class SingleUploadResult:
    """Outcome of a one-request upload."""

    artifact: StoredArtifact
    file_name: str
    elapsed_seconds: float

    @property
    def file_size(self) -> str:
        return format_file_size(self.artifact.byte_length)

    @property
    def upload_time(self) -> str:
        return f"{self.elapsed_seconds:.1f}s"


def _parse_int(field: str, value: Optional[str]) -> int:
    if value is None or str(value).strip() == "":
        raise MalformedRequest(field)
    try:
        return int(str(value).strip())
    except ValueError:
        raise MalformedRequest(field, f"Field {field} must be an integer", received=value)


def _require_text(field: str, value: Optional[str]) -> str:
    if value is None or not value.strip():
        raise MalformedRequest(field)
    return value.strip()


class UploadOrchestrator:
    """Turns upload requests into stored artifacts.

    Chunks are buffered in the session store until every position is filled;
    the assembled bytes (or a single-shot payload) go to the artifact sink.
    """

    def __init__(
        self,
        sessions: ChunkSessionStore,
        sink: ArtifactSink,
        max_upload_bytes: int,
        allowed_mime_types: Optional[list[str]] = None,
    ):
        self.sessions = sessions
        self.sink = sink
        self.max_upload_bytes = max_upload_bytes
        self.allowed_mime_types = allowed_mime_types

    async def receive_chunk(
        self,
        upload_id: Optional[str],
        chunk_index: Optional[str],
        total_chunks: Optional[str],
        file_name: Optional[str],
        file_type: Optional[str],
        chunk: Optional[bytes],
        base_url: str,
    ) -> ChunkProgress | ChunkComplete:
        """Accept one chunk; store the file once the last one arrives.

        Raises:
            MalformedRequest: a required field is missing or not an integer
            InvalidChunkIndex: index outside the session's declared range
            PayloadRejected: chunk above the chunk size bound
            BackendUnavailable: the sink failed to store the assembled file
        """
        upload_id = _require_text("uploadId", upload_id)
        file_name = _require_text("fileName", file_name)
        if not chunk:
            raise MalformedRequest("chunk")
        index = _parse_int("chunkIndex", chunk_index)
        total = _parse_int("totalChunks", total_chunks)
        if total < 1:
            raise MalformedRequest("totalChunks", "totalChunks must be at least 1", received=total)
        mime_type = (file_type or "").strip() or DEFAULT_MIME_TYPE

        token = upload_id_context.set(upload_id)
        try:
            # Completeness check and finalize must not interleave with other
            # chunks of the same upload.
            with self.sessions.locked(upload_id):
                state = self.sessions.begin_or_continue(
                    upload_id, index, chunk, total, file_name, mime_type
                )
                logger.debug(f"Received chunk {index + 1}/{state.total} for {file_name}")

                if not self.sessions.is_complete(upload_id):
                    return ChunkProgress(received=state.received, total=state.total)

                session = self.sessions.get(upload_id)
                file_name, mime_type = session.file_name, session.mime_type
                content = self.sessions.finalize(upload_id)

            artifact = await self.sink.store(content, file_name, mime_type, base_url)

            logger.info(
                f"File complete: {file_name} ({format_file_size(len(content))})",
                extra={"file_id": artifact.artifact_id, "backend": self.sink.get_backend_name()},
            )
            return ChunkComplete(artifact=artifact, file_name=file_name)
        finally:
            upload_id_context.reset(token)

    def check_payload(self, mime_type: Optional[str], size_bytes: int) -> None:
        """Reject wrong types and oversized payloads before anything is stored."""
        if self.allowed_mime_types and mime_type not in self.allowed_mime_types:
            raise PayloadRejected.wrong_type(mime_type, self.allowed_mime_types)
        if size_bytes > self.max_upload_bytes:
            raise PayloadRejected.too_large(size_bytes, self.max_upload_bytes)

    async def upload_single(
        self,
        file_name: Optional[str],
        mime_type: Optional[str],
        file_data: Optional[BinaryIO],
        base_url: str,
    ) -> SingleUploadResult:
        """Store a whole file sent in one request.

        Raises:
            MalformedRequest: no file in the request
            PayloadRejected: wrong MIME type or above MAX_UPLOAD_MB
            BackendUnavailable: the sink failed to store the file
        """
        if file_data is None:
            raise MalformedRequest("file", "No file provided")

        file_data.seek(0, 2)
        size_bytes = file_data.tell()
        file_data.seek(0)

        self.check_payload(mime_type, size_bytes)
        if size_bytes == 0:
            raise MalformedRequest("file", "Uploaded file is empty", received=0)

        file_name = (file_name or "").strip() or "unnamed.pdf"
        mime_type = mime_type or DEFAULT_MIME_TYPE
        logger.info(f"Processing file: {file_name}, Size: {format_file_size(size_bytes)}")

        started = time.perf_counter()
        artifact = await self.sink.store(file_data.read(), file_name, mime_type, base_url)
        elapsed = time.perf_counter() - started

        logger.info(
            f"Upload successful: {artifact.artifact_id} ({elapsed * 1000:.0f}ms)",
            extra={"backend": self.sink.get_backend_name(), "size_bytes": size_bytes},
        )
        return SingleUploadResult(artifact=artifact, file_name=file_name, elapsed_seconds=elapsed)
