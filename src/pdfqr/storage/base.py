"""Abstract artifact sink interface."""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class StoredArtifact:
    """Where a finished upload ended up."""

    artifact_id: str
    url: str
    byte_length: int


class ArtifactSink(ABC):
    """Abstract base class for the places finished uploads are handed to."""

    @abstractmethod
    async def store(
        self, content: bytes, file_name: str, mime_type: str, base_url: str
    ) -> StoredArtifact:
        """Store a fully assembled file.

        Args:
            content: Complete file bytes
            file_name: Original file name
            mime_type: MIME type
            base_url: Serving origin, used by sinks that build local links

        Returns:
            The generated id and public retrieval URL
        """
        pass

    @abstractmethod
    def get_backend_name(self) -> str:
        """Return backend identifier."""
        pass


def sanitize_filename(filename: str) -> str:
    """Remove path traversal and dangerous characters."""
    safe = filename.replace("../", "").replace("..\\", "")
    safe = safe.replace("/", "_").replace("\\", "_")
    safe = re.sub(r"[^a-zA-Z0-9._-]", "_", safe)
    return safe[:255]
