"""Local disk storage for chat attachments."""

import logging
import time
from pathlib import Path
from typing import BinaryIO, Optional, Tuple

from pydantic import BaseModel

from config import MAX_UPLOAD_SIZE, UPLOAD_DIR
from core.exceptions import ValidationError

logger = logging.getLogger(__name__)

UPLOAD_URL_PREFIX = "/uploads"
_CHUNK_SIZE = 64 * 1024


class FileTooLargeError(ValidationError):
    """Raised when an upload exceeds the configured size cap."""

    def __init__(self, max_size: int):
        self.max_size = max_size
        super().__init__(f"File exceeds the maximum size of {max_size} bytes")


class StoredFile(BaseModel):
    url: str
    name: str
    content_type: str
    size: int


def _open_target(directory: Path, extension: str) -> Tuple[Path, BinaryIO]:
    """Create ``<epoch-millis><ext>`` exclusively, stepping forward on a name clash."""
    stamp = int(time.time() * 1000)
    while True:
        path = directory / f"{stamp}{extension}"
        try:
            return path, open(path, "xb")
        except FileExistsError:
            stamp += 1


def save_upload(
    stream: BinaryIO,
    original_name: str,
    content_type: Optional[str],
    upload_dir: Optional[Path] = None,
    max_size: Optional[int] = None,
) -> StoredFile:
    """Write an uploaded file to disk under a timestamp-derived name.

    Args:
        stream: Readable binary stream of the upload.
        original_name: File name given by the client; only its extension is kept.
        content_type: MIME type reported by the client.
        upload_dir: Directory served under /uploads. Defaults to UPLOAD_DIR.
        max_size: Maximum accepted size in bytes. Defaults to MAX_UPLOAD_SIZE.

    Returns:
        StoredFile describing where the file can be fetched.

    Raises:
        FileTooLargeError: If the upload is larger than max_size. Nothing is
            left on disk in that case.
    """
    upload_dir = upload_dir or UPLOAD_DIR
    max_size = max_size or MAX_UPLOAD_SIZE
    upload_dir.mkdir(parents=True, exist_ok=True)
    path, target = _open_target(upload_dir, Path(original_name).suffix.lower())

    size = 0
    try:
        with target as f:
            while True:
                chunk = stream.read(_CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > max_size:
                    raise FileTooLargeError(max_size)
                f.write(chunk)
    except FileTooLargeError:
        path.unlink(missing_ok=True)
        raise

    logger.info("Stored upload %s (%d bytes)", path.name, size)
    return StoredFile(
        url=f"{UPLOAD_URL_PREFIX}/{path.name}",
        name=original_name,
        content_type=content_type or "application/octet-stream",
        size=size,
    )


def delete_upload(stored: StoredFile, upload_dir: Optional[Path] = None) -> None:
    """Remove a stored upload whose message was never saved."""
    path = (upload_dir or UPLOAD_DIR) / Path(stored.url).name
    path.unlink(missing_ok=True)
