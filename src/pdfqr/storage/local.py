"""Local in-memory artifact sink."""

from pdfqr.storage.artifact_store import ArtifactStore
from pdfqr.storage.base import ArtifactSink, StoredArtifact


def build_file_url(base_url: str, artifact_id: str) -> str:
    """Retrieval URL served by the file route."""
    return f"{base_url.rstrip('/')}/api/file/{artifact_id}"


class LocalArtifactSink(ArtifactSink):
    """Keeps finished uploads in the bounded process-local store."""

    def __init__(self, store: ArtifactStore):
        self.artifacts = store

    async def store(
        self, content: bytes, file_name: str, mime_type: str, base_url: str
    ) -> StoredArtifact:
        """Insert into the artifact store and link to the file route."""
        artifact_id = self.artifacts.insert(file_name, mime_type, content)
        return StoredArtifact(
            artifact_id=artifact_id,
            url=build_file_url(base_url, artifact_id),
            byte_length=len(content),
        )

    def get_backend_name(self) -> str:
        return "local"
