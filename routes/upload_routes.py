"""
FastAPI routes for uploading study notes.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, File, UploadFile

from routes.dependencies import require_user
from services.upload_service import IncomingFile, UploadService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/uploads", tags=["uploads"])

upload_service = UploadService()


@router.post("", status_code=201)
async def upload_files(
    files: List[UploadFile] = File(...),
    user_id: str = Depends(require_user),
):
    """
    Upload up to 10 files (images, PDF, plain text, markdown), 10MB each.
    Each file is classified once as image, pdf, document or other.
    """
    incoming = []
    for f in files:
        incoming.append(IncomingFile(
            filename=f.filename or "upload",
            content_type=f.content_type or "application/octet-stream",
            content=await f.read(),
        ))

    saved = upload_service.save_uploads(user_id, incoming)
    return {"message": "Files uploaded successfully", "files": saved}


@router.get("")
async def list_uploads(user_id: str = Depends(require_user)):
    return upload_service.list_uploads(user_id)


@router.delete("/{upload_id}")
async def delete_upload(upload_id: str, user_id: str = Depends(require_user)):
    return upload_service.delete_upload(user_id, upload_id)
