"""Bounded in-memory store for completed uploads."""

import itertools
import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, Optional
from uuid import uuid4

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Artifact:
    """A fully assembled file retained for retrieval."""

    artifact_id: str
    file_name: str
    mime_type: str
    content: bytes = field(repr=False)
    created_at: float
    sequence: int
    uploaded_at: datetime

    @property
    def byte_length(self) -> int:
        return len(self.content)


class ArtifactStore:
    """In-memory artifact store with oldest-first eviction.

    Holds at most ``retention_limit`` artifacts. Insert and eviction run in a
    single critical section so the cap is never exceeded between calls.
    """

    def __init__(self, retention_limit: int, clock: Callable[[], float] = time.monotonic):
        if retention_limit < 1:
            raise ValueError("retention_limit must be at least 1")
        self.retention_limit = retention_limit
        self._clock = clock
        self._artifacts: Dict[str, Artifact] = {}
        self._sequence = itertools.count()
        self._lock = threading.Lock()

    def insert(self, file_name: str, mime_type: str, content: bytes) -> str:
        """Store a new artifact and evict down to the retention limit.

        Returns:
            Generated artifact id
        """
        with self._lock:
            artifact_id = uuid4().hex
            while artifact_id in self._artifacts:
                artifact_id = uuid4().hex

            self._artifacts[artifact_id] = Artifact(
                artifact_id=artifact_id,
                file_name=file_name,
                mime_type=mime_type,
                content=bytes(content),
                created_at=self._clock(),
                sequence=next(self._sequence),
                uploaded_at=datetime.now(timezone.utc),
            )
            self._evict(keep=artifact_id)

        return artifact_id

    def _evict(self, keep: str) -> None:
        overflow = len(self._artifacts) - self.retention_limit
        if overflow <= 0:
            return

        candidates = [a for a in self._artifacts.values() if a.artifact_id != keep]
        oldest = sorted(candidates, key=lambda a: (a.created_at, a.sequence))[:overflow]
        for artifact in oldest:
            del self._artifacts[artifact.artifact_id]

        logger.info(
            f"Evicted {overflow} old file(s)",
            extra={"evicted_ids": [a.artifact_id for a in oldest]},
        )

    def get(self, artifact_id: str) -> Optional[Artifact]:
        """Retrieve an artifact by id."""
        return self._artifacts.get(artifact_id)

    def count(self) -> int:
        return len(self._artifacts)

    def total_bytes(self) -> int:
        return sum(a.byte_length for a in list(self._artifacts.values()))
