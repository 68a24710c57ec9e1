"""
Local disk storage for uploaded payment proofs and images.

Files land in a single public directory mounted at /uploads. The store does
not know which record owns a file; whoever deletes the record removes the file.
"""

import random
import time
from pathlib import Path
from typing import Optional

import structlog
from fastapi import UploadFile

logger = structlog.get_logger()


def public_url(origin: str, filename: Optional[str]) -> Optional[str]:
    """Absolute URL of an uploaded file, e.g. http://localhost:5000/uploads/1700000000000-42.png"""
    if not filename:
        return None
    return f"{origin.rstrip('/')}/uploads/{filename}"


def is_attached(upload: Optional[UploadFile]) -> bool:
    # Browsers send an empty, unnamed part for a file input left blank
    return upload is not None and bool(upload.filename)


class UploadStore:
    def __init__(self, directory):
        self.directory = Path(directory)

    def ensure_directory(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)

    def generate_filename(self, original: Optional[str]) -> str:
        """<epoch-millis>-<random>.<original extension>"""
        suffix = Path(original or "").suffix
        return f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}{suffix}"

    async def save(self, upload: UploadFile) -> str:
        filename = self.generate_filename(upload.filename)
        self.ensure_directory()

        contents = await upload.read()
        (self.directory / filename).write_bytes(contents)

        logger.info("upload_stored", filename=filename, size=len(contents))
        return filename

    def remove(self, filename: str) -> bool:
        """
        Best-effort delete. A failure is logged as upload_cleanup_failed and
        reported through the return value, never raised.
        """
        path = self.directory / filename
        try:
            path.unlink()
        except OSError as e:
            logger.warning("upload_cleanup_failed", filename=filename, error=str(e))
            return False

        logger.info("upload_removed", filename=filename)
        return True
