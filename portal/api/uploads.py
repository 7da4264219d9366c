"""
Upload storage.

Files (post attachments and avatars) are written to `settings.UPLOAD_DIR`
under a random name that keeps the original extension, and are served back
by the static mount at `/uploads`.
"""

import logging
import os
import shutil
import uuid

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from portal.api.models import FileRec
from portal.api.utils import get_current_user
from portal.database.config.config import settings

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp"}


def guess_ext(filename: str | None) -> str:
    """
    Return the lowercased extension of a filename.

    Args:
        filename (str | None): Original filename.

    Returns:
        str: Lowercased file extension (e.g., ".pdf"), or "" when absent.
    """
    _, ext = os.path.splitext(filename or "")
    return ext.lower()


def classify(f: UploadFile) -> str:
    """'pdf', 'image' or 'file', from the MIME type with the extension as fallback."""
    mime = (f.content_type or "").split(";")[0].strip().lower()
    ext = guess_ext(f.filename)
    if mime == "application/pdf" or ext == ".pdf":
        return "pdf"
    if mime.startswith("image/") or ext in IMAGE_EXTENSIONS:
        return "image"
    return "file"


def persist_upload(f: UploadFile) -> FileRec:
    """
    Save an uploaded file to the uploads directory.

    - Generates a unique filename using UUID.
    - Preserves original extension.
    - Returns metadata as FileRec (public URL under `/uploads`).

    Args:
        f (UploadFile): The file uploaded by the client.

    Returns:
        FileRec: original name, public URL, kind and size in bytes.
    """
    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    new_name = f"{uuid.uuid4().hex}{guess_ext(f.filename)}"
    dest = os.path.join(settings.UPLOAD_DIR, new_name)
    with open(dest, "wb") as out:
        shutil.copyfileobj(f.file, out)
    return FileRec(
        name=f.filename or new_name,
        url=f"/uploads/{new_name}",
        type=classify(f),
        size=os.path.getsize(dest),
    )


router = APIRouter(tags=["uploads"])
"""Creates the FastAPI router in which we define its routes"""


@router.post("/upload")
def upload(file: UploadFile = File(None), user_id: str = Depends(get_current_user)) -> FileRec:
    """
    Store one post attachment.

    Responses:
        200: FileRec {name, url, type, size}
        400: {'message': 'No file uploaded'}
    """
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")
    stored = persist_upload(file)
    logger.info(f"User {user_id} uploaded {stored.name} ({stored.size} bytes)")
    return stored
