"""Artifact sink selection."""

from typing import Optional

from pdfqr.core.config import Settings
from pdfqr.storage.artifact_store import ArtifactStore
from pdfqr.storage.base import ArtifactSink
from pdfqr.storage.drive import DriveArtifactSink
from pdfqr.storage.local import LocalArtifactSink


def get_artifact_sink(config: Settings, artifact_store: Optional[ArtifactStore]) -> ArtifactSink:
    """Build the sink named by ARTIFACT_SINK.

    Raises:
        ValueError: unknown sink name, or "local" without an artifact store
    """
    sink_name = config.ARTIFACT_SINK.lower()

    if sink_name == "local":
        if artifact_store is None:
            raise ValueError("Local artifact sink requires an artifact store")
        return LocalArtifactSink(artifact_store)
    if sink_name == "drive":
        return DriveArtifactSink(config)

    raise ValueError(f"Unknown ARTIFACT_SINK: {config.ARTIFACT_SINK}")
