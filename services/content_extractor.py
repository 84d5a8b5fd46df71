"""
Turn a stored upload into generation-ready input: raw text for documents and
PDFs, or a base64 attachment for images (and PDFs when PDF_QUIZ_MODE=vision).
No OCR happens locally.
"""

import base64
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from models.study_models import Attachment, ExtractedContent, UploadKind
from utils.exceptions import ExtractionError, UnsupportedTypeError

logger = logging.getLogger(__name__)

TEXT_MIME_TYPES = {"text/plain", "text/markdown"}

ATTACHMENT_MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".pdf": "application/pdf",
}
DEFAULT_ATTACHMENT_MIME = "image/jpeg"


def attachment_mime_type(file_path: str) -> str:
    """MIME type for the vision path, resolved from the file extension"""
    return ATTACHMENT_MIME_TYPES.get(Path(file_path).suffix.lower(), DEFAULT_ATTACHMENT_MIME)


def _read_bytes(file_path: str) -> bytes:
    path = Path(file_path)
    try:
        return path.read_bytes()
    except FileNotFoundError as e:
        raise ExtractionError(
            "Uploaded file is missing on disk",
            error_code="FILE_NOT_FOUND",
            context={"path": file_path},
        ) from e
    except OSError as e:
        raise ExtractionError(f"Could not read uploaded file: {e}", context={"path": file_path}) from e


def read_text_document(file_path: str) -> str:
    """Read a plain-text or markdown file verbatim"""
    raw = _read_bytes(file_path)
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ExtractionError("Document is not valid UTF-8 text", context={"path": file_path}) from e

    if not text.strip():
        raise ExtractionError("empty content", error_code="EMPTY_CONTENT", context={"path": file_path})
    return text


def extract_pdf_text(file_path: str) -> str:
    """
    Decode a PDF to text with pypdf.

    Encrypted, scanned (image-only) and corrupt PDFs all end up here with no
    usable text and raise ExtractionError("empty content").
    """
    path = Path(file_path)
    if not path.exists():
        raise ExtractionError("Uploaded file is missing on disk", error_code="FILE_NOT_FOUND", context={"path": file_path})

    try:
        reader = PdfReader(path)
        if reader.is_encrypted:
            reader.decrypt("")
        text_parts = []
        for page in reader.pages:
            page_text = page.extract_text()
            if page_text:
                text_parts.append(page_text)
    except (PyPdfError, ValueError, NotImplementedError) as e:
        logger.warning(f"PDF text extraction failed for {file_path}: {e}")
        raise ExtractionError(
            "empty content",
            error_code="EMPTY_CONTENT",
            context={"path": file_path, "reason": str(e)},
        ) from e

    full_text = "\n".join(text_parts)
    if not full_text.strip():
        raise ExtractionError("empty content", error_code="EMPTY_CONTENT", context={"path": file_path})

    logger.info(f"Extracted {len(full_text)} characters from {len(reader.pages)} pages using pypdf")
    return full_text


def encode_attachment(file_path: str, filename: Optional[str] = None) -> Attachment:
    """Read raw bytes and base64-encode them for the vision path"""
    raw = _read_bytes(file_path)
    return Attachment(
        mime_type=attachment_mime_type(file_path),
        data=base64.b64encode(raw).decode("ascii"),
        filename=filename or Path(file_path).name,
    )


def extract_content(upload: Dict[str, Any], pdf_mode: str = "text") -> ExtractedContent:
    """
    Convert an upload record into text or an attachment.

    Args:
        upload: Upload record with file_type, path, mimetype, original_name
        pdf_mode: "text" decodes PDFs locally, "vision" sends the PDF bytes to the model

    Raises:
        UnsupportedTypeError: kind "other" or a document MIME type we cannot read
        ExtractionError: file missing, unreadable or empty
    """
    kind = upload.get("file_type")
    file_path = upload.get("path", "")
    mimetype = upload.get("mimetype", "")

    if kind == UploadKind.DOCUMENT.value:
        if mimetype not in TEXT_MIME_TYPES:
            raise UnsupportedTypeError("Unsupported document type", context={"mimetype": mimetype})
        return ExtractedContent(text=read_text_document(file_path))

    if kind == UploadKind.PDF.value:
        if pdf_mode == "vision":
            return ExtractedContent(attachment=encode_attachment(file_path, upload.get("original_name")))
        return ExtractedContent(text=extract_pdf_text(file_path))

    if kind == UploadKind.IMAGE.value:
        return ExtractedContent(attachment=encode_attachment(file_path, upload.get("original_name")))

    raise UnsupportedTypeError("Unsupported file type for quiz generation", context={"file_type": kind})
