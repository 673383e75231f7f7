# adoptme/uploads.py
from pathlib import Path
from uuid import uuid4

import aiofiles
from fastapi import HTTPException, UploadFile

from .config import get_settings

settings = get_settings()

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}
DOCUMENT_EXTENSIONS = {".pdf", ".doc", ".docx", ".txt", ".jpg", ".jpeg", ".png"}
MAX_IMAGE_BYTES = 5 * 1024 * 1024
MAX_DOCUMENT_BYTES = 10 * 1024 * 1024
CHUNK = 1024 * 1024


def check_upload_type(file: UploadFile, allowed_extensions: set[str], images_only: bool = False) -> str:
    """Raises 415 for a disallowed file and returns its lower-cased extension."""
    if images_only and not (file.content_type or "").startswith("image/"):
        raise HTTPException(status_code=415, detail="Only images are allowed")

    ext = Path(file.filename or "").suffix.lower()
    if ext not in allowed_extensions:
        raise HTTPException(
            status_code=415,
            detail=f"File type not allowed: {ext or 'unknown'}. Allowed: {sorted(allowed_extensions)}",
        )
    return ext


async def save_upload(
    file: UploadFile,
    folder: str,
    allowed_extensions: set[str],
    max_bytes: int,
    images_only: bool = False,
) -> tuple[str, int]:
    """
    Streams an upload to MEDIA_DIR/<folder>/ and returns (public url, size).
    """
    ext = check_upload_type(file, allowed_extensions, images_only)
    filename = f"{uuid4().hex}{ext}"
    rel_path = Path(folder) / filename
    abs_path = Path(settings.media_dir) / rel_path
    abs_path.parent.mkdir(parents=True, exist_ok=True)

    size = 0
    async with aiofiles.open(abs_path, "wb") as out:
        while chunk := await file.read(CHUNK):
            size += len(chunk)
            if size > max_bytes:
                break
            await out.write(chunk)

    if size > max_bytes:
        abs_path.unlink(missing_ok=True)
        raise HTTPException(status_code=413, detail=f"File too large (max {max_bytes // (1024 * 1024)}MB)")

    return f"/media/{rel_path.as_posix()}", size


def delete_upload(url: str) -> None:
    """Removes a file previously returned by `save_upload`."""
    rel_path = url.removeprefix("/media/")
    (Path(settings.media_dir) / rel_path).unlink(missing_ok=True)
