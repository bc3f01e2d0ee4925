"""Error taxonomy for the PDF QR service.

Every error carries an ``ErrorKind`` tag, an HTTP status classification and a
structured context dict (field name, limit, received value) so handlers can
render them without parsing messages.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Tagged error kinds surfaced to clients."""

    MALFORMED_REQUEST = "malformed_request"
    PAYLOAD_REJECTED = "payload_rejected"
    INVALID_CHUNK_INDEX = "invalid_chunk_index"
    SESSION_NOT_FOUND = "session_not_found"
    INCOMPLETE_SESSION = "incomplete_session"
    ARTIFACT_NOT_FOUND = "artifact_not_found"
    UNAUTHORIZED = "unauthorized"
    BACKEND_UNAVAILABLE = "backend_unavailable"
    INTERNAL_ERROR = "internal_error"


class PdfQrError(Exception):
    """Base exception for the PDF QR service."""

    kind: ErrorKind = ErrorKind.MALFORMED_REQUEST
    status_code: int = 400

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = {k: v for k, v in context.items() if v is not None}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.message,
            "kind": self.kind.value,
            "context": self.context,
        }


class MalformedRequest(PdfQrError):
    """A required request field is absent or unparseable."""

    kind = ErrorKind.MALFORMED_REQUEST
    status_code = 400

    def __init__(self, field: str, message: Optional[str] = None, received: Any = None):
        super().__init__(message or f"Missing required field: {field}", field=field, received=received)
        self.field = field


class PayloadRejected(PdfQrError):
    """Upload rejected for its MIME type or size, before any storage mutation."""

    kind = ErrorKind.PAYLOAD_REJECTED

    REASON_TYPE = "type"
    REASON_SIZE = "size"

    def __init__(self, reason: str, message: str, limit: Any = None, received: Any = None):
        super().__init__(message, reason=reason, limit=limit, received=received)
        self.reason = reason
        self.status_code = 413 if reason == self.REASON_SIZE else 400

    @classmethod
    def wrong_type(cls, received: Optional[str], allowed: list[str]) -> "PayloadRejected":
        return cls(
            cls.REASON_TYPE,
            f"Content type {received} not allowed",
            limit=allowed,
            received=received,
        )

    @classmethod
    def too_large(cls, received: int, limit: int) -> "PayloadRejected":
        return cls(
            cls.REASON_SIZE,
            f"File too large ({received / 1024 / 1024:.1f}MB). Maximum is {limit / 1024 / 1024:.0f}MB.",
            limit=limit,
            received=received,
        )


class InvalidChunkIndex(PdfQrError):
    """Chunk index outside [0, declared chunk count)."""

    kind = ErrorKind.INVALID_CHUNK_INDEX
    status_code = 400

    def __init__(self, session_id: str, chunk_index: int, total: int):
        super().__init__(
            f"Chunk index {chunk_index} out of range for {total} chunks",
            session_id=session_id,
            received=chunk_index,
            limit=total,
        )


class SessionNotFound(PdfQrError):
    """No in-flight upload session with this id."""

    kind = ErrorKind.SESSION_NOT_FOUND
    status_code = 400

    def __init__(self, session_id: str):
        super().__init__(f"Upload session {session_id} not found", session_id=session_id)


class IncompleteSession(PdfQrError):
    """Finalize requested before every chunk arrived."""

    kind = ErrorKind.INCOMPLETE_SESSION
    status_code = 400

    def __init__(self, session_id: str, received: int, total: int):
        super().__init__(
            f"Upload session {session_id} incomplete: {received}/{total} chunks received",
            session_id=session_id,
            received=received,
            limit=total,
        )


class ArtifactNotFound(PdfQrError):
    """Artifact id unknown or already evicted."""

    kind = ErrorKind.ARTIFACT_NOT_FOUND
    status_code = 404

    def __init__(self, artifact_id: str):
        super().__init__("File not found or expired", artifact_id=artifact_id)


class AccessDenied(PdfQrError):
    """Shared password missing or wrong."""

    kind = ErrorKind.UNAUTHORIZED
    status_code = 401

    def __init__(self, message: str = "Incorrect password. Please try again."):
        super().__init__(message)


class BackendUnavailable(PdfQrError):
    """Remote artifact store failed (timeout, auth, quota)."""

    kind = ErrorKind.BACKEND_UNAVAILABLE

    def __init__(self, backend: str, message: str, timeout: bool = False):
        super().__init__(message, backend=backend, timeout=timeout or None)
        self.backend = backend
        self.timeout = timeout
        self.status_code = 504 if timeout else 500


class UnexpectedError(PdfQrError):
    """Anything a route did not anticipate, rendered like every other error."""

    kind = ErrorKind.INTERNAL_ERROR
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
