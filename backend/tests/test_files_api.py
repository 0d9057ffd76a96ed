"""Tests for file endpoints"""
import pytest
from fastapi.testclient import TestClient

from conftest import bearer
from filevault.config import settings
from filevault.stores.blob_store import LocalBlobStore


def _upload(client: TestClient, headers: dict, name: str = "hello.txt", content: bytes = b"hello world",
            mime_type: str = "text/plain") -> dict:
    response = client.post("/file/upload", files={"file": (name, content, mime_type)}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest.fixture
def bob_headers(signup) -> dict:
    return bearer(signup("bob@example.com")["token"])


def test_upload_file(client: TestClient, auth_headers: dict, blob_store: LocalBlobStore):
    """Test uploading returns the file summary"""
    response = client.post(
        "/file/upload", files={"file": ("Report.PDF", b"%PDF-1.4", "application/pdf")}, headers=auth_headers
    )
    assert response.status_code == 201

    data = response.json()["data"]
    assert data["name"] == "Report.PDF"
    assert data["extension"] == ".pdf"
    assert data["mimeType"] == "application/pdf"
    assert data["size"] == 8
    assert data["uploadDate"]
    assert "storage_name" not in data
    assert len(list(blob_store.root.iterdir())) == 1


def test_upload_requires_token(client: TestClient):
    """Test uploading without a token is unauthorized"""
    response = client.post("/file/upload", files={"file": ("a.txt", b"x", "text/plain")})
    assert response.status_code == 401


def test_upload_without_file(client: TestClient, auth_headers: dict):
    """Test a request without the file field is a 400"""
    response = client.post("/file/upload", headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["message"] == "No file uploaded"


def test_upload_too_large(client: TestClient, auth_headers: dict, blob_store: LocalBlobStore, monkeypatch):
    """Test files over MAX_FILE_SIZE are rejected with 413 and nothing is stored"""
    monkeypatch.setattr(settings, "MAX_FILE_SIZE", 10)

    response = client.post("/file/upload", files={"file": ("big.bin", b"x" * 11, "application/octet-stream")},
                           headers=auth_headers)
    assert response.status_code == 413
    assert response.json()["success"] is False
    assert list(blob_store.root.iterdir()) == []


def test_list_files(client: TestClient, auth_headers: dict):
    """Test listing pages through the caller's files newest first"""
    uploaded = [_upload(client, auth_headers, name=f"file{i}.txt") for i in range(3)]

    response = client.get("/file/list", params={"page": 1, "list_size": 2}, headers=auth_headers)
    assert response.status_code == 200

    data = response.json()["data"]
    assert data["page"] == 1
    assert data["listSize"] == 2
    assert data["totalCount"] == 3
    assert data["totalPages"] == 2
    assert [f["id"] for f in data["files"]] == [uploaded[2]["id"], uploaded[1]["id"]]

    second = client.get("/file/list", params={"page": 2, "list_size": 2}, headers=auth_headers).json()["data"]
    assert [f["id"] for f in second["files"]] == [uploaded[0]["id"]]


def test_list_files_defaults(client: TestClient, auth_headers: dict):
    """Test missing or non-positive paging params fall back to defaults"""
    _upload(client, auth_headers)

    data = client.get("/file/list", params={"page": 0, "list_size": 0}, headers=auth_headers).json()["data"]
    assert data["page"] == 1
    assert data["listSize"] == 10
    assert data["totalPages"] == 1
    assert len(data["files"]) == 1


def test_list_files_empty(client: TestClient, auth_headers: dict):
    """Test a user without files gets an empty first page"""
    data = client.get("/file/list", headers=auth_headers).json()["data"]
    assert data["files"] == []
    assert data["totalCount"] == 0
    assert data["totalPages"] == 0


def test_list_files_huge_page(client: TestClient, auth_headers: dict):
    """Test a page number beyond 64-bit range is an empty page, not a server error"""
    _upload(client, auth_headers)

    response = client.get("/file/list", params={"page": "100000000000000000000"}, headers=auth_headers)
    assert response.status_code == 200

    data = response.json()["data"]
    assert data["files"] == []
    assert data["totalCount"] == 1


def test_upload_overlong_extension(client: TestClient, auth_headers: dict, blob_store: LocalBlobStore):
    """Test a file name with a very long suffix still uploads and downloads"""
    name = "a." + "x" * 300
    uploaded = _upload(client, auth_headers, name=name, content=b"long")

    assert uploaded["name"] == name
    assert uploaded["extension"] == ""
    assert len(list(blob_store.root.iterdir())) == 1

    download = client.get(f"/file/download/{uploaded['id']}", headers=auth_headers)
    assert download.content == b"long"


def test_list_only_own_files(client: TestClient, auth_headers: dict, bob_headers: dict):
    """Test listings never include other users' files"""
    _upload(client, auth_headers, name="alice.txt")
    _upload(client, bob_headers, name="bob.txt")

    data = client.get("/file/list", headers=bob_headers).json()["data"]
    assert [f["name"] for f in data["files"]] == ["bob.txt"]


def test_get_file(client: TestClient, auth_headers: dict):
    """Test reading one file's metadata"""
    uploaded = _upload(client, auth_headers)

    response = client.get(f"/file/{uploaded['id']}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["data"] == uploaded


def test_get_file_not_found(client: TestClient, auth_headers: dict):
    """Test unknown ids are 404 and non-numeric ids are 400"""
    assert client.get("/file/9999", headers=auth_headers).status_code == 404
    assert client.get("/file/not-a-number", headers=auth_headers).status_code == 400


def test_download_file(client: TestClient, auth_headers: dict):
    """Test downloading returns the original bytes and headers"""
    uploaded = _upload(client, auth_headers, name="notes.txt", content=b"line one\nline two")

    response = client.get(f"/file/download/{uploaded['id']}", headers=auth_headers)
    assert response.status_code == 200
    assert response.content == b"line one\nline two"
    assert response.headers["content-type"].startswith("text/plain")
    assert 'filename="notes.txt"' in response.headers["content-disposition"]


def test_download_missing_blob(client: TestClient, auth_headers: dict, blob_store: LocalBlobStore):
    """Test a row whose blob vanished downloads as 404"""
    uploaded = _upload(client, auth_headers)
    for path in blob_store.root.iterdir():
        path.unlink()

    response = client.get(f"/file/download/{uploaded['id']}", headers=auth_headers)
    assert response.status_code == 404


def test_update_file(client: TestClient, auth_headers: dict, blob_store: LocalBlobStore):
    """Test updating replaces content and metadata and drops the old blob"""
    uploaded = _upload(client, auth_headers, name="draft.txt", content=b"v1")

    response = client.put(
        f"/file/update/{uploaded['id']}",
        files={"file": ("final.md", b"version two", "text/markdown")},
        headers=auth_headers,
    )
    assert response.status_code == 200

    data = response.json()["data"]
    assert data["id"] == uploaded["id"]
    assert data["name"] == "final.md"
    assert data["extension"] == ".md"
    assert data["mimeType"] == "text/markdown"
    assert data["size"] == 11

    download = client.get(f"/file/download/{uploaded['id']}", headers=auth_headers)
    assert download.content == b"version two"
    assert len(list(blob_store.root.iterdir())) == 1


def test_update_without_file(client: TestClient, auth_headers: dict):
    """Test an update without a payload is a 400 and changes nothing"""
    uploaded = _upload(client, auth_headers)

    response = client.put(f"/file/update/{uploaded['id']}", headers=auth_headers)
    assert response.status_code == 400
    assert client.get(f"/file/{uploaded['id']}", headers=auth_headers).json()["data"] == uploaded


def test_update_missing_file(client: TestClient, auth_headers: dict, blob_store: LocalBlobStore):
    """Test updating an unknown id is a 404 and leaves no blob behind"""
    response = client.put("/file/update/9999", files={"file": ("a.txt", b"x", "text/plain")}, headers=auth_headers)
    assert response.status_code == 404
    assert list(blob_store.root.iterdir()) == []


def test_delete_file(client: TestClient, auth_headers: dict, blob_store: LocalBlobStore):
    """Test deleting removes the metadata and the blob"""
    uploaded = _upload(client, auth_headers)

    response = client.delete(f"/file/delete/{uploaded['id']}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["success"] is True

    assert client.get(f"/file/{uploaded['id']}", headers=auth_headers).status_code == 404
    assert client.delete(f"/file/delete/{uploaded['id']}", headers=auth_headers).status_code == 404
    assert list(blob_store.root.iterdir()) == []


def test_other_users_file_is_not_found(client: TestClient, auth_headers: dict, bob_headers: dict):
    """Test another user's file id behaves like a missing id everywhere"""
    uploaded = _upload(client, auth_headers, content=b"alice only")
    file_id = uploaded["id"]

    assert client.get(f"/file/{file_id}", headers=bob_headers).status_code == 404
    assert client.get(f"/file/download/{file_id}", headers=bob_headers).status_code == 404
    update = client.put(f"/file/update/{file_id}", files={"file": ("x.txt", b"x", "text/plain")}, headers=bob_headers)
    assert update.status_code == 404
    assert client.delete(f"/file/delete/{file_id}", headers=bob_headers).status_code == 404

    download = client.get(f"/file/download/{file_id}", headers=auth_headers)
    assert download.content == b"alice only"


def test_file_routes_require_token(client: TestClient):
    """Test every file route needs a bearer token"""
    assert client.get("/file/list").status_code == 401
    assert client.get("/file/1").status_code == 401
    assert client.get("/file/download/1").status_code == 401
    assert client.delete("/file/delete/1").status_code == 401
