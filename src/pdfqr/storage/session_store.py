"""In-flight chunked upload sessions."""

import logging
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, Optional

from pdfqr.core.exceptions import (
    IncompleteSession,
    InvalidChunkIndex,
    MalformedRequest,
    PayloadRejected,
    SessionNotFound,
)

logger = logging.getLogger(__name__)


@dataclass
class UploadSession:
    """Accumulation state for one file delivered as chunks."""

    session_id: str
    declared_chunk_count: int
    file_name: str
    mime_type: str
    created_at: float
    last_activity: float
    chunks: Dict[int, bytes] = field(default_factory=dict)
    received_bytes: int = 0

    def put(self, chunk_index: int, data: bytes) -> None:
        """Store a chunk, replacing any earlier copy of the same index."""
        previous = self.chunks.get(chunk_index)
        if previous is not None:
            self.received_bytes -= len(previous)
        self.chunks[chunk_index] = data
        self.received_bytes += len(data)

    def size_after(self, chunk_index: int, size: int) -> int:
        """Byte total the session would hold after writing ``size`` bytes at ``chunk_index``."""
        previous = self.chunks.get(chunk_index)
        return self.received_bytes - (len(previous) if previous is not None else 0) + size

    def assemble(self) -> bytes:
        return b"".join(self.chunks[i] for i in range(self.declared_chunk_count))

    @property
    def received_count(self) -> int:
        return len(self.chunks)

    @property
    def is_complete(self) -> bool:
        return len(self.chunks) == self.declared_chunk_count


@dataclass(frozen=True)
class SessionState:
    """Progress snapshot returned after each chunk."""

    session_id: str
    received: int
    total: int

    @property
    def complete(self) -> bool:
        return self.received == self.total


class _KeyedLock:
    """Reference-counted lock entry for one session id."""

    __slots__ = ("lock", "holders")

    def __init__(self):
        self.lock = threading.RLock()
        self.holders = 0


class ChunkSessionStore:
    """In-memory store for chunk buffers keyed by client upload id.

    All operations on one session id are serialized through a per-id lock;
    operations on different ids never contend beyond the short registry lock.
    """

    def __init__(
        self,
        max_chunk_bytes: Optional[int] = None,
        session_ttl_seconds: float = 0,
        clock: Callable[[], float] = time.monotonic,
        max_upload_bytes: Optional[int] = None,
    ):
        self.max_chunk_bytes = max_chunk_bytes
        self.max_upload_bytes = max_upload_bytes
        self.session_ttl_seconds = session_ttl_seconds
        self._clock = clock
        self._sessions: Dict[str, UploadSession] = {}
        self._locks: Dict[str, _KeyedLock] = {}
        self._registry_lock = threading.Lock()

    @contextmanager
    def locked(self, session_id: str) -> Iterator[None]:
        """Hold the per-session lock for the duration of the block."""
        with self._registry_lock:
            entry = self._locks.get(session_id)
            if entry is None:
                entry = self._locks[session_id] = _KeyedLock()
            entry.holders += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._registry_lock:
                entry.holders -= 1
                if entry.holders == 0:
                    del self._locks[session_id]

    def begin_or_continue(
        self,
        session_id: str,
        chunk_index: int,
        chunk_bytes: bytes,
        declared_chunk_count: int,
        file_name: str,
        mime_type: str,
    ) -> SessionState:
        """Write one chunk into its session, creating the session on first sight.

        Metadata passed with later chunks is ignored in favour of the values
        recorded when the session was created.

        Raises:
            MalformedRequest: empty chunk
            InvalidChunkIndex: chunk_index outside [0, declared chunk count)
            PayloadRejected: chunk larger than the chunk bound, or the file
                would exceed the upload ceiling
        """
        if not chunk_bytes:
            raise MalformedRequest("chunk")
        if self.max_chunk_bytes is not None and len(chunk_bytes) > self.max_chunk_bytes:
            raise PayloadRejected.too_large(len(chunk_bytes), self.max_chunk_bytes)

        self.expire_stale()

        with self.locked(session_id):
            now = self._clock()
            session = self._sessions.get(session_id)
            total = session.declared_chunk_count if session else declared_chunk_count

            if not 0 <= chunk_index < total:
                raise InvalidChunkIndex(session_id, chunk_index, total)

            if self.max_upload_bytes is not None:
                if session is None and self.max_chunk_bytes is not None:
                    declared_bytes = declared_chunk_count * self.max_chunk_bytes
                    if declared_bytes > self.max_upload_bytes:
                        raise PayloadRejected.too_large(declared_bytes, self.max_upload_bytes)

                new_size = session.size_after(chunk_index, len(chunk_bytes)) if session else len(chunk_bytes)
                if new_size > self.max_upload_bytes:
                    raise PayloadRejected.too_large(new_size, self.max_upload_bytes)

            if session is None:
                session = UploadSession(
                    session_id=session_id,
                    declared_chunk_count=declared_chunk_count,
                    file_name=file_name,
                    mime_type=mime_type,
                    created_at=now,
                    last_activity=now,
                )
                self._sessions[session_id] = session
                logger.debug(
                    f"Upload session created: {session_id} ({declared_chunk_count} chunks, {file_name})"
                )
            elif declared_chunk_count != session.declared_chunk_count:
                logger.warning(
                    "Chunk declares a different total than its session, keeping the original",
                    extra={
                        "session_id": session_id,
                        "declared": declared_chunk_count,
                        "recorded": session.declared_chunk_count,
                    },
                )

            session.put(chunk_index, bytes(chunk_bytes))
            session.last_activity = now

            return SessionState(
                session_id=session_id,
                received=session.received_count,
                total=session.declared_chunk_count,
            )

    def is_complete(self, session_id: str) -> bool:
        """True iff the session exists and every chunk position is filled."""
        with self.locked(session_id):
            session = self._sessions.get(session_id)
            return session is not None and session.is_complete

    def finalize(self, session_id: str) -> bytes:
        """Concatenate all chunks in index order and drop the session.

        Raises:
            SessionNotFound: unknown session id
            IncompleteSession: some chunk positions are still empty
        """
        with self.locked(session_id):
            session = self._sessions.get(session_id)
            if session is None:
                raise SessionNotFound(session_id)
            if not session.is_complete:
                raise IncompleteSession(
                    session_id, session.received_count, session.declared_chunk_count
                )

            content = session.assemble()
            del self._sessions[session_id]
            return content

    def get(self, session_id: str) -> Optional[UploadSession]:
        """Retrieve a session by id."""
        return self._sessions.get(session_id)

    def expire_stale(self) -> int:
        """Drop sessions idle for longer than the TTL. Returns how many were dropped."""
        if not self.session_ttl_seconds:
            return 0

        cutoff = self._clock() - self.session_ttl_seconds
        expired = 0
        for session_id, session in list(self._sessions.items()):
            if session.last_activity > cutoff:
                continue
            # Sessions being written right now are not stale.
            with self._registry_lock:
                if session_id in self._locks:
                    continue
                if self._sessions.get(session_id) is session:
                    del self._sessions[session_id]
                    expired += 1

        if expired:
            logger.info(f"Expired {expired} abandoned upload session(s)")
        return expired

    def count(self) -> int:
        """Number of in-flight sessions."""
        return len(self._sessions)
