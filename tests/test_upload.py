"""Tests for the upload endpoints."""

import io
from unittest.mock import AsyncMock

import pytest


def post_chunk(client, data: bytes, index: int, total: int, upload_id: str = "up-1", **fields):
    form = {
        "chunkIndex": str(index),
        "totalChunks": str(total),
        "fileName": "manual.pdf",
        "fileType": "application/pdf",
        "uploadId": upload_id,
    }
    form.update(fields)
    files = {"chunk": ("blob", io.BytesIO(data), "application/octet-stream")}
    return client.post("/api/upload-chunk", data=form, files=files)


def test_chunked_upload_round_trip(client, app):
    """Chunks sent out of order produce one retrievable file."""
    response = post_chunk(client, b"BBBB", 1, 3)
    assert response.status_code == 200
    assert response.json() == {"complete": False, "received": 1, "total": 3}

    response = post_chunk(client, b"AAAA", 0, 3)
    assert response.json() == {"complete": False, "received": 2, "total": 3}

    response = post_chunk(client, b"CC", 2, 3)
    assert response.status_code == 200
    body = response.json()
    assert body["complete"] is True
    assert body["fileName"] == "manual.pdf"
    assert body["fileSize"] == "0.0 MB"
    assert body["url"] == f"http://testserver/api/file/{body['fileId']}"

    artifact = app.state.artifact_store.get(body["fileId"])
    assert artifact.content == b"AAAABBBBCC"
    assert app.state.session_store.count() == 0


def test_chunk_missing_upload_id(client):
    files = {"chunk": ("blob", io.BytesIO(b"data"), "application/octet-stream")}
    data = {"chunkIndex": "0", "totalChunks": "1", "fileName": "a.pdf"}

    response = client.post("/api/upload-chunk", data=data, files=files)

    assert response.status_code == 400
    body = response.json()
    assert body["kind"] == "malformed_request"
    assert body["context"]["field"] == "uploadId"


def test_chunk_missing_chunk(client):
    data = {"chunkIndex": "0", "totalChunks": "1", "fileName": "a.pdf", "uploadId": "x"}

    response = client.post("/api/upload-chunk", data=data)

    assert response.status_code == 400
    assert response.json()["context"]["field"] == "chunk"


def test_chunk_index_out_of_range(client, app):
    """chunkIndex 5 with totalChunks 3 fails and leaves the session alone."""
    post_chunk(client, b"AAAA", 0, 3)

    response = post_chunk(client, b"ZZZZ", 5, 3)

    assert response.status_code == 400
    assert response.json()["kind"] == "invalid_chunk_index"
    assert app.state.session_store.get("up-1").received_count == 1


def test_oversized_chunk(client):
    response = post_chunk(client, b"x" * (1024 * 1024 + 1), 0, 2)

    assert response.status_code == 413
    assert response.json()["kind"] == "payload_rejected"


def test_upload_valid_pdf(client, app):
    file_content = b"%PDF-1.7\n%%EOF"
    files = {"file": ("brochure.pdf", io.BytesIO(file_content), "application/pdf")}

    response = client.post("/api/upload", files=files)

    assert response.status_code == 200
    body = response.json()
    assert set(body) == {"url", "fileName", "fileSize", "uploadTime", "fileId"}
    assert body["fileName"] == "brochure.pdf"
    assert body["url"].endswith(f"/api/file/{body['fileId']}")
    assert app.state.artifact_store.get(body["fileId"]).content == file_content


def test_upload_invalid_mime_type(client, app):
    """A text/plain upload is rejected and the store is unchanged."""
    files = {"file": ("notes.txt", io.BytesIO(b"hello"), "text/plain")}

    response = client.post("/api/upload", files=files)

    assert response.status_code == 400
    body = response.json()
    assert body["kind"] == "payload_rejected"
    assert "content type" in body["error"].lower()
    assert app.state.artifact_store.count() == 0


def test_upload_oversized_file(client, app):
    file_content = b"x" * (4 * 1024 * 1024 + 1)
    files = {"file": ("large.pdf", io.BytesIO(file_content), "application/pdf")}

    response = client.post("/api/upload", files=files)

    assert response.status_code == 413
    assert "too large" in response.json()["error"].lower()
    assert app.state.artifact_store.count() == 0


def test_upload_without_file(client):
    response = client.post("/api/upload", data={"something": "else"})

    assert response.status_code == 400
    assert response.json()["context"]["field"] == "file"


def test_public_base_url_overrides_origin(config):
    from fastapi.testclient import TestClient

    from pdfqr.main import create_app

    config.PUBLIC_BASE_URL = "https://qr.example.com"
    client = TestClient(create_app(config))
    files = {"file": ("a.pdf", io.BytesIO(b"%PDF"), "application/pdf")}

    response = client.post("/api/upload", files=files)

    assert response.json()["url"].startswith("https://qr.example.com/api/file/")


@pytest.mark.parametrize("uploads", [4, 6])
def test_retention_limit_applies_to_uploads(client, app, uploads):
    ids = []
    for i in range(uploads):
        files = {"file": (f"{i}.pdf", io.BytesIO(b"%PDF"), "application/pdf")}
        ids.append(client.post("/api/upload", files=files).json()["fileId"])

    assert app.state.artifact_store.count() == 3
    assert client.get(f"/api/file/{ids[0]}").status_code == 404
    assert client.get(f"/api/file/{ids[-1]}").status_code == 200


def test_chunk_declaring_huge_total_rejected(client, app):
    """One byte declaring twenty million chunks is refused before a session exists."""
    response = post_chunk(client, b"x", 0, 20_000_000, upload_id="huge")

    assert response.status_code == 413
    body = response.json()
    assert body["kind"] == "payload_rejected"
    assert body["context"]["limit"] == 4 * 1024 * 1024
    assert app.state.session_store.get("huge") is None
    assert client.get("/api/status").json()["activeSessions"] == 0


def test_chunked_file_above_upload_ceiling_rejected(client, app):
    """Splitting an oversized file into chunks does not get around the ceiling."""
    chunk = b"x" * (1024 * 1024)

    response = post_chunk(client, chunk, 0, 5, upload_id="split")

    assert response.status_code == 413
    assert app.state.session_store.count() == 0


def test_chunked_file_at_upload_ceiling_accepted(client, app):
    chunk = b"x" * (1024 * 1024)

    for index in range(4):
        response = post_chunk(client, chunk, index, 4, upload_id="edge")
        assert response.status_code == 200

    body = response.json()
    assert body["complete"] is True
    assert app.state.artifact_store.get(body["fileId"]).byte_length == 4 * 1024 * 1024


def test_unexpected_chunk_failure_uses_error_shape(client, app):
    """An unanticipated exception still renders as {error, kind, context}."""
    app.state.orchestrator.receive_chunk = AsyncMock(side_effect=RuntimeError("disk on fire"))

    response = post_chunk(client, b"data", 0, 1)

    assert response.status_code == 500
    body = response.json()
    assert body["kind"] == "internal_error"
    assert "disk on fire" in body["error"]
    assert body["context"] == {}
    assert "detail" not in body


def test_unexpected_upload_failure_uses_error_shape(client, app):
    app.state.orchestrator.upload_single = AsyncMock(side_effect=RuntimeError("boom"))
    files = {"file": ("a.pdf", io.BytesIO(b"%PDF"), "application/pdf")}

    response = client.post("/api/upload", files=files)

    assert response.status_code == 500
    assert set(response.json()) == {"error", "kind", "context"}
    assert response.json()["kind"] == "internal_error"


def test_error_schema_documented(client):
    """Routes advertise the structured error body in the OpenAPI document."""
    schema = client.get("/openapi.json").json()

    assert "ErrorResponse" in schema["components"]["schemas"]
    chunk_responses = schema["paths"]["/api/upload-chunk"]["post"]["responses"]
    assert chunk_responses["413"]["content"]["application/json"]["schema"] == {
        "$ref": "#/components/schemas/ErrorResponse"
    }
    file_responses = schema["paths"]["/api/file/{artifact_id}"]["get"]["responses"]
    assert "404" in file_responses
