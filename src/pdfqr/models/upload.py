"""Upload data models."""

from datetime import datetime
from typing import Any, Dict, Literal

from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    """Serializes with the camelCase names the browser client expects."""

    model_config = ConfigDict(populate_by_name=True)


class ChunkProgressResponse(CamelModel):
    """Response model while chunks are still arriving."""

    complete: Literal[False] = False
    received: int
    total: int


class ChunkCompleteResponse(CamelModel):
    """Response model once the last chunk has been assembled."""

    complete: Literal[True] = True
    url: str
    file_name: str = Field(alias="fileName")
    file_size: str = Field(alias="fileSize")
    file_id: str = Field(alias="fileId")


class UploadResponse(CamelModel):
    """Response model for single-shot upload."""

    url: str
    file_name: str = Field(alias="fileName")
    file_size: str = Field(alias="fileSize")
    upload_time: str = Field(alias="uploadTime")
    file_id: str = Field(alias="fileId")


class StatusResponse(CamelModel):
    """Response model for the status endpoint."""

    success: bool = True
    files_stored: int = Field(alias="filesStored")
    active_sessions: int = Field(alias="activeSessions")
    stored_bytes: int = Field(alias="storedBytes")
    memory_usage: int = Field(alias="memoryUsage")
    uptime: str
    timestamp: datetime
    sink: str


class ErrorResponse(BaseModel):
    """Structured error body."""

    error: str
    kind: str
    context: Dict[str, Any] = {}
