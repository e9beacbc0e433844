import io
import os

import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from conftest import create_assignment, pdf, submit
from gradebook.core.errors import ErrorCode, NotFound, ValidationError


def _upload(name, content, content_type):
    return UploadFile(
        file=io.BytesIO(content),
        filename=name,
        headers=Headers({"content-type": content_type}),
    )


def test_download_stored_file(client, teacher, student):
    hw = create_assignment(client, teacher)
    stored = submit(client, student, hw["id"], files=[pdf("essay.pdf", b"%PDF essay body")]).json()["filePaths"][0]

    response = client.get(f"/api/files/{stored}", headers=teacher["headers"])
    assert response.status_code == 200
    assert response.content == b"%PDF essay body"
    assert "essay.pdf" in response.headers["content-disposition"]


def test_download_requires_token(client, teacher, student):
    hw = create_assignment(client, teacher)
    stored = submit(client, student, hw["id"], files=[pdf()]).json()["filePaths"][0]
    assert client.get(f"/api/files/{stored}").status_code == 401


def test_download_missing_file(client, student):
    response = client.get("/api/files/nope.pdf", headers=student["headers"])
    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"


def test_download_cannot_escape_upload_dir(client, student):
    response = client.get("/api/files/..%2Fgradebook.db", headers=student["headers"])
    assert response.status_code == 404


@pytest.mark.anyio
async def test_storage_keeps_original_name_and_content(storage):
    name = await storage.save_file(_upload("../../report.txt", b"hello", "text/plain"))

    assert name.endswith("_report.txt")
    assert "/" not in name
    with open(storage.resolve_path(name), "rb") as fh:
        assert fh.read() == b"hello"


@pytest.mark.anyio
async def test_storage_rejects_unlisted_type(storage):
    with pytest.raises(ValidationError) as excinfo:
        await storage.save_file(_upload("pic.png", b"png", "image/png"))
    assert excinfo.value.code == ErrorCode.INVALID_FILE_TYPE


@pytest.mark.anyio
async def test_storage_rejects_oversized_file_without_leftovers(storage):
    storage.max_upload_size = 4096
    with pytest.raises(ValidationError) as excinfo:
        await storage.save_file(_upload("big.pdf", b"x" * 5000, "application/pdf"))
    assert excinfo.value.code == ErrorCode.FILE_TOO_LARGE
    assert os.listdir(storage.upload_dir) == []


def test_storage_delete_file(storage, tmp_path):
    path = tmp_path / "uploads" / "abc_notes.txt"
    path.write_bytes(b"notes")

    assert storage.delete_file("abc_notes.txt") is True
    assert not path.exists()
    assert storage.delete_file("abc_notes.txt") is False
    with pytest.raises(NotFound):
        storage.resolve_path("abc_notes.txt")


def test_storage_refuses_paths_outside_upload_dir(storage, tmp_path):
    (tmp_path / "secret.txt").write_bytes(b"secret")
    with pytest.raises(NotFound):
        storage.resolve_path("../secret.txt")
    assert storage.delete_file("../secret.txt") is False
    assert (tmp_path / "secret.txt").exists()
