"""
Tests for the /api/upload endpoints.
"""
import os

import config
from conftest import auth_headers

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def test_upload_image(client, user):
    response = client.post(
        "/api/upload/image",
        files={"image": ("photo.png", PNG_BYTES, "image/png")},
        headers=auth_headers(user["access_token"]),
    )
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "File uploaded successfully"
    assert data["url"] == f"/uploads/{data['filename']}"
    assert data["filename"].startswith("image-")
    assert data["filename"].endswith(".png")
    assert data["original_name"] == "photo.png"
    assert data["size"] == len(PNG_BYTES)
    assert os.path.exists(os.path.join(config.UPLOAD_PATH, data["filename"]))

    # Served back as a static file
    assert client.get(data["url"]).content == PNG_BYTES


def test_extension_follows_content_type(client, user):
    response = client.post(
        "/api/upload/image",
        files={"image": ("page.html", b"<script>alert(1)</script>", "image/png")},
        headers=auth_headers(user["access_token"]),
    )
    assert response.status_code == 200
    data = response.json()
    assert data["filename"].endswith(".png")
    assert data["original_name"] == "page.html"

    served = client.get(data["url"])
    assert served.headers["content-type"].startswith("image/png")


def test_upload_requires_auth(client):
    response = client.post("/api/upload/image", files={"image": ("photo.png", PNG_BYTES, "image/png")})
    assert response.status_code == 401


def test_no_file(client, user):
    response = client.post("/api/upload/image", headers=auth_headers(user["access_token"]))
    assert response.status_code == 400
    assert response.json()["message"] == "No file uploaded"


def test_invalid_type(client, user):
    response = client.post(
        "/api/upload/image",
        files={"image": ("notes.txt", b"hello", "text/plain")},
        headers=auth_headers(user["access_token"]),
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid file type. Only JPEG, PNG, and WebP are allowed."


def test_file_too_large(client, user, monkeypatch):
    monkeypatch.setattr(config, "MAX_FILE_SIZE", 16)
    before = set(os.listdir(config.UPLOAD_PATH))
    response = client.post(
        "/api/upload/image",
        files={"image": ("big.png", PNG_BYTES, "image/png")},
        headers=auth_headers(user["access_token"]),
    )
    assert response.status_code == 400
    assert response.json()["message"] == "File too large"
    assert set(os.listdir(config.UPLOAD_PATH)) == before


def test_s3_not_implemented(client, user):
    response = client.post("/api/upload/s3", headers=auth_headers(user["access_token"]))
    assert response.status_code == 501
    assert response.json()["message"] == "S3 upload not implemented yet"
