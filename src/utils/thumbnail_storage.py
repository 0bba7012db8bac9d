"""On-disk storage for bimbel thumbnails.

Files live in ``<upload_dir>/thumbnails`` and are referenced by their public
path (``/uploads/thumbnails/<file>``), which the static mount in ``app.py``
serves.
"""

import logging
import time
from pathlib import Path
from typing import Optional

from config import ALLOWED_THUMBNAIL_EXTENSIONS, THUMBNAIL_SUBDIR
from core.exceptions import InternalError, ValidationError

logger = logging.getLogger(__name__)


class ThumbnailStorage:
    """Saves and removes uploaded thumbnail images."""

    def __init__(self, upload_dir: Path, url_prefix: str = "/uploads"):
        """Initialize ThumbnailStorage.

        Args:
            upload_dir: Root of the public upload directory.
            url_prefix: URL path the upload directory is served under.
        """
        self.upload_dir = Path(upload_dir)
        self.url_prefix = url_prefix.rstrip("/")
        self.thumbnail_dir = self.upload_dir / THUMBNAIL_SUBDIR

    def save(self, filename: Optional[str], content: bytes) -> str:
        """Write an uploaded image and return its public path.

        Raises:
            ValidationError: If the file is missing or not jpg/jpeg/png.
            InternalError: If the file cannot be written.
        """
        if not filename:
            raise ValidationError("thumbnail is required")

        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_THUMBNAIL_EXTENSIONS:
            raise ValidationError("thumbnail must be a jpg, jpeg or png file")

        stored_name = f"bimbel_{time.time_ns()}{ext}"
        try:
            self.thumbnail_dir.mkdir(parents=True, exist_ok=True)
            with open(self.thumbnail_dir / stored_name, "wb") as f:
                f.write(content)
        except OSError as e:
            logger.error("Failed to store thumbnail %s: %s", stored_name, e)
            raise InternalError("failed to store thumbnail") from e

        logger.info("Stored thumbnail %s (%d bytes)", stored_name, len(content))
        return f"{self.url_prefix}/{THUMBNAIL_SUBDIR}/{stored_name}"

    def path_for(self, reference: str) -> Optional[Path]:
        """Map a public path back to the file inside the upload directory."""
        if not reference:
            return None
        marker = f"{self.url_prefix}/"
        idx = reference.find(marker)
        if idx < 0:
            return None
        relative = reference[idx + len(marker):]
        candidate = (self.upload_dir / relative).resolve()
        # Never follow a reference outside the upload directory
        if self.upload_dir.resolve() not in candidate.parents:
            return None
        return candidate

    def exists(self, reference: str) -> bool:
        path = self.path_for(reference)
        return path is not None and path.is_file()

    def remove(self, reference: str) -> None:
        """Delete a stored thumbnail. Best effort: failures are only logged."""
        path = self.path_for(reference)
        if path is None:
            logger.warning("Ignoring thumbnail reference outside uploads: %s", reference)
            return
        try:
            path.unlink()
            logger.info("Removed thumbnail %s", path.name)
        except FileNotFoundError:
            logger.warning("Thumbnail already gone: %s", path.name)
        except OSError as e:
            logger.error("Failed to remove thumbnail %s: %s", path.name, e)
