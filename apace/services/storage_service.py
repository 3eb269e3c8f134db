import logging
import os
import uuid
from typing import Optional

from fastapi import UploadFile

from apace.core.config import settings
from apace.core.errors import BadRequestError

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "application/pdf": ".pdf",
}


def validate_upload(field: str, upload: UploadFile) -> bytes:
    """
    Check type and size of one uploaded document and return its bytes.

    Raises:
        BadRequestError: unsupported type, empty file or over the size limit
    """
    if upload.content_type not in ALLOWED_CONTENT_TYPES:
        raise BadRequestError(f"{field}: only JPEG, PNG and PDF files are allowed")

    contents = upload.file.read(settings.MAX_UPLOAD_BYTES + 1)
    if not contents:
        raise BadRequestError(f"{field}: file is empty")
    if len(contents) > settings.MAX_UPLOAD_BYTES:
        limit_mb = settings.MAX_UPLOAD_BYTES // (1024 * 1024)
        raise BadRequestError(f"{field}: file exceeds the {limit_mb}MB limit")
    return contents


def save_document(driver_id, field: str, content_type: str, contents: bytes) -> str:
    directory = os.path.join(settings.UPLOAD_DIR, "driver-documents", str(driver_id))
    os.makedirs(directory, exist_ok=True)
    filename = f"{field}-{uuid.uuid4().hex}{ALLOWED_CONTENT_TYPES[content_type]}"
    path = os.path.join(directory, filename)
    with open(path, "wb") as handle:
        handle.write(contents)
    logger.info("Stored %s for driver %s at %s", field, driver_id, path)
    return path


def delete_file(path: Optional[str]) -> bool:
    """Remove a stored file; a missing file is not an error."""
    if not path:
        return False
    try:
        os.remove(path)
    except FileNotFoundError:
        logger.warning("Stored file already gone: %s", path)
        return False
    logger.info("Deleted stored file %s", path)
    return True
