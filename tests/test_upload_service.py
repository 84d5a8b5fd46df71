import re

import pytest

from services.upload_service import IncomingFile, UploadService, classify_mime_type, unique_filename
from utils.exceptions import AuthorizationError, StorageError, ValidationError


@pytest.fixture
def service(stores, tmp_path):
    return UploadService(storage=stores["uploads"], upload_dir=str(tmp_path / "uploads"))


def _file(name="notes.txt", content_type="text/plain", content=b"cells divide"):
    return IncomingFile(filename=name, content_type=content_type, content=content)


@pytest.mark.parametrize("mimetype,kind", [
    ("image/png", "image"),
    ("application/pdf", "pdf"),
    ("text/markdown", "document"),
    ("application/zip", "other"),
])
def test_classify(mimetype, kind):
    assert classify_mime_type(mimetype).value == kind


def test_unique_filename_shape():
    name = unique_filename("My Notes (final).pdf")
    assert re.fullmatch(r"My_Notes_final-\d+-\d+\.pdf", name)


def test_unsafe_names_stay_inside_upload_dir():
    assert "/" not in unique_filename("../../etc/passwd")


def test_save_list_delete(service, tmp_path):
    saved = service.save_uploads("user-1", [_file(), _file("board.png", "image/png", b"\x89PNG")])

    assert [f["fileType"] for f in saved] == ["document", "image"]
    assert len(list((tmp_path / "uploads").iterdir())) == 2
    assert [u["originalName"] for u in service.list_uploads("user-1")] == ["board.png", "notes.txt"]

    with pytest.raises(AuthorizationError):
        service.delete_upload("user-2", saved[0]["id"])

    service.delete_upload("user-1", saved[0]["id"])
    assert len(service.list_uploads("user-1")) == 1
    assert len(list((tmp_path / "uploads").iterdir())) == 1


def test_delete_with_missing_file_still_removes_record(service, stores, tmp_path):
    saved = service.save_uploads("user-1", [_file()])
    for path in (tmp_path / "uploads").iterdir():
        path.unlink()

    service.delete_upload("user-1", saved[0]["id"])

    assert stores["uploads"].get_upload(saved[0]["id"]) is None


def test_rejects_disallowed_type(service):
    with pytest.raises(ValidationError):
        service.save_uploads("user-1", [_file("run.exe", "application/x-msdownload")])


def test_rejects_oversized_file(service):
    with pytest.raises(ValidationError):
        service.save_uploads("user-1", [_file(content=b"x" * (10 * 1024 * 1024 + 1))])


def test_rejects_too_many_files(service):
    with pytest.raises(ValidationError):
        service.save_uploads("user-1", [_file() for _ in range(11)])


def test_written_files_are_removed_when_recording_fails(service, stores, tmp_path, monkeypatch):
    def fail(upload_data):
        raise StorageError("Failed saving upload")

    monkeypatch.setattr(stores["uploads"], "save_upload", fail)

    with pytest.raises(StorageError):
        service.save_uploads("user-1", [_file()])
    assert list((tmp_path / "uploads").iterdir()) == []


def test_records_from_a_failed_batch_are_removed(service, stores, tmp_path, monkeypatch):
    real_save = stores["uploads"].save_upload
    calls = []

    def fail_second(upload_data):
        calls.append(upload_data)
        if len(calls) == 2:
            raise StorageError("Failed saving upload")
        return real_save(upload_data)

    monkeypatch.setattr(stores["uploads"], "save_upload", fail_second)

    with pytest.raises(StorageError):
        service.save_uploads("user-1", [_file("a.txt"), _file("b.txt")])

    assert stores["uploads"].list_uploads("user-1") == []
    assert list((tmp_path / "uploads").iterdir()) == []
