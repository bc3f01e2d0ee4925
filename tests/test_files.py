"""Tests for file retrieval and QR routes."""

import io


def upload(client, name="guide.pdf", content=b"%PDF-1.4 guide"):
    files = {"file": (name, io.BytesIO(content), "application/pdf")}
    return client.post("/api/upload", files=files).json()


def test_get_file_returns_bytes_inline(client):
    body = upload(client)

    response = client.get(f"/api/file/{body['fileId']}")

    assert response.status_code == 200
    assert response.content == b"%PDF-1.4 guide"
    assert response.headers["content-type"] == "application/pdf"
    assert response.headers["content-disposition"] == 'inline; filename="guide.pdf"'
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.headers["content-length"] == str(len(b"%PDF-1.4 guide"))


def test_view_alias(client):
    body = upload(client)

    response = client.get(f"/api/view/{body['fileId']}")

    assert response.status_code == 200
    assert response.content == b"%PDF-1.4 guide"


def test_unknown_file_is_404(client):
    response = client.get("/api/file/does-not-exist")

    assert response.status_code == 404
    assert response.json()["error"] == "File not found or expired"
    assert response.json()["kind"] == "artifact_not_found"


def test_filename_is_sanitized_in_header(client):
    body = upload(client, name='evil"; name=x.pdf')

    response = client.get(f"/api/file/{body['fileId']}")

    assert '"; name' not in response.headers["content-disposition"]


def test_file_qr_is_png(client):
    body = upload(client)

    response = client.get(f"/api/file/{body['fileId']}/qr")

    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert response.content.startswith(b"\x89PNG")


def test_file_qr_unknown_id(client):
    assert client.get("/api/file/missing/qr").status_code == 404


def test_qr_for_arbitrary_link(client):
    response = client.get("/api/qr", params={"data": "https://drive.google.com/file/d/abc/view"})

    assert response.status_code == 200
    assert response.content.startswith(b"\x89PNG")


def test_qr_requires_data(client):
    response = client.get("/api/qr")

    assert response.status_code == 400
    assert response.json()["context"]["field"] == "data"
