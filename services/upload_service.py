"""
Upload handling: write files to UPLOAD_DIR, record metadata, delete both.
"""

import logging
import os
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from werkzeug.utils import secure_filename

from models.study_models import UploadKind
from utils.exceptions import ValidationError
from utils.file_storage import UploadStorage
from utils.ownership import require_owned
from utils.settings import get_settings

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = {
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/webp",
    "application/pdf",
    "text/plain",
    "text/markdown",
}


@dataclass
class IncomingFile:
    filename: str
    content_type: str
    content: bytes


def classify_mime_type(mimetype: str) -> UploadKind:
    """Exactly one kind per upload, derived once from the declared MIME type"""
    if mimetype.startswith("image/"):
        return UploadKind.IMAGE
    if mimetype == "application/pdf":
        return UploadKind.PDF
    if mimetype.startswith("text/"):
        return UploadKind.DOCUMENT
    return UploadKind.OTHER


def unique_filename(original_name: str) -> str:
    """<stem>-<epoch ms>-<random><ext>, sanitised for the local filesystem"""
    safe = secure_filename(original_name) or "upload"
    stem, ext = os.path.splitext(safe)
    suffix = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}"
    return f"{stem or 'upload'}-{suffix}{ext}"


def upload_summary(upload: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": str(upload["id"]),
        "originalName": upload.get("original_name"),
        "filename": upload.get("filename"),
        "url": f"/uploads/{upload.get('filename')}",
        "mimetype": upload.get("mimetype"),
        "size": upload.get("size"),
        "fileType": upload.get("file_type"),
        "uploadedAt": upload.get("created_at"),
    }


class UploadService:
    """Store uploaded notes on disk and in the document store"""

    def __init__(self, storage: Optional[UploadStorage] = None, upload_dir: Optional[str] = None):
        self.storage = storage or UploadStorage()
        self.upload_dir = Path(upload_dir or get_settings().upload_dir)

    def _validate(self, files: List[IncomingFile]) -> None:
        settings = get_settings()
        if not files:
            raise ValidationError("No files uploaded", error_code="NO_FILES")
        if len(files) > settings.max_files_per_upload:
            raise ValidationError(
                f"Too many files. Maximum {settings.max_files_per_upload} files at once",
                error_code="FILE_LIMIT_EXCEEDED",
            )
        for f in files:
            if f.content_type not in ALLOWED_MIME_TYPES:
                raise ValidationError(
                    "File type not allowed. Allowed types: images, PDF, TXT, MD",
                    error_code="FILE_TYPE_NOT_ALLOWED",
                    context={"filename": f.filename, "mimetype": f.content_type},
                )
            if len(f.content) > settings.max_upload_bytes:
                raise ValidationError(
                    f"File size too large. Maximum {settings.max_upload_mb}MB per file",
                    error_code="FILE_TOO_LARGE",
                    context={"filename": f.filename, "size": len(f.content)},
                )

    def save_uploads(self, user_id: str, files: List[IncomingFile]) -> List[Dict[str, Any]]:
        """
        Write every file, then record each. If any step fails, the files and
        records created by this call are removed before the error propagates.
        """
        self._validate(files)
        self.upload_dir.mkdir(parents=True, exist_ok=True)

        written: List[Path] = []
        recorded: List[str] = []
        saved = []
        try:
            for f in files:
                filename = unique_filename(f.filename)
                path = self.upload_dir / filename
                path.write_bytes(f.content)
                written.append(path)

                record = self.storage.save_upload({
                    "user_id": user_id,
                    "original_name": f.filename,
                    "filename": filename,
                    "path": str(path),
                    "mimetype": f.content_type,
                    "size": len(f.content),
                    "file_type": classify_mime_type(f.content_type).value,
                })
                recorded.append(str(record["id"]))
                saved.append(upload_summary(record))
        except Exception:
            self._rollback(written, recorded)
            raise

        logger.info(f"Stored {len(saved)} upload(s) for user {user_id}")
        return saved

    def _rollback(self, written: List[Path], recorded: List[str]) -> None:
        for upload_id in recorded:
            try:
                self.storage.delete_upload(upload_id)
            except Exception as delete_err:
                logger.error(f"Error deleting upload record {upload_id}: {delete_err}")
        for path in written:
            try:
                path.unlink(missing_ok=True)
            except OSError as unlink_err:
                logger.error(f"Error deleting file {path}: {unlink_err}")

    def list_uploads(self, user_id: str) -> List[Dict[str, Any]]:
        return [upload_summary(u) for u in self.storage.list_uploads(user_id)]

    def delete_upload(self, user_id: str, upload_id: str) -> Dict[str, Any]:
        """
        Remove the physical file, then the record. A failed file removal is
        logged and does not block the record delete.
        """
        upload = require_owned(self.storage.get_upload(upload_id), user_id, "Upload", upload_id)

        path = Path(upload.get("path", ""))
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not delete file {path} for upload {upload_id}: {e}")

        self.storage.delete_upload(upload_id)
        return {"message": "File deleted successfully", "id": upload_id}
