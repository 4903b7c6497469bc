import re
import time
from pathlib import Path
from typing import List, Optional

from fastapi import UploadFile
from structlog import get_logger

from app.config import settings
from app.exceptions import UploadRejectedError

logger = get_logger()


def stored_filename(original: str, directory: Path) -> str:
    """`<epoch millis>-<name>` with whitespace runs turned into dashes; never reuses an existing name."""
    name = re.sub(r"\s+", "-", Path(original or "image").name)
    stamp = int(time.time() * 1000)
    while (directory / f"{stamp}-{name}").exists():
        stamp += 1
    return f"{stamp}-{name}"


async def store_images(files: List[UploadFile], upload_dir: Optional[str] = None) -> List[str]:
    """Validate and save uploaded images, returning their public paths in upload order.

    Every file is checked before anything is written, so a rejected request stores nothing.
    """
    if not files:
        raise UploadRejectedError("No files uploaded")
    if len(files) > settings.UPLOAD_MAX_FILES:
        raise UploadRejectedError(f"Too many files. Maximum is {settings.UPLOAD_MAX_FILES}.")

    max_mb = settings.UPLOAD_MAX_BYTES // (1024 * 1024)
    payloads = []
    for upload in files:
        if not (upload.content_type or "").startswith("image/"):
            raise UploadRejectedError("Only image files are allowed!", upload.filename)
        # Multipart parts carry their size; oversized ones are never read into memory
        if upload.size is not None and upload.size > settings.UPLOAD_MAX_BYTES:
            raise UploadRejectedError(f"File too large. Maximum size is {max_mb}MB.", upload.filename)
        data = await upload.read()
        if len(data) > settings.UPLOAD_MAX_BYTES:
            raise UploadRejectedError(f"File too large. Maximum size is {max_mb}MB.", upload.filename)
        payloads.append((upload.filename, data))

    directory = Path(upload_dir or settings.UPLOAD_DIR)
    directory.mkdir(parents=True, exist_ok=True)
    paths = []
    for original, data in payloads:
        name = stored_filename(original, directory)
        (directory / name).write_bytes(data)
        paths.append(f"{settings.UPLOAD_URL_PREFIX}/{name}")

    logger.info("Images stored", count=len(paths), directory=str(directory))
    return paths
