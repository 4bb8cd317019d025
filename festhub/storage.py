"""Object store for event images."""
import logging
from pathlib import Path, PurePosixPath

from festhub.config import settings
from festhub.errors import UploadError

logger = logging.getLogger(__name__)


class ObjectStore:
    def upload(self, path: str, data: bytes) -> str:
        """Store bytes under path and return their public URL."""
        raise NotImplementedError


class LocalObjectStore(ObjectStore):
    """Writes objects below a directory served at base_url."""

    def __init__(self, root: str, base_url: str):
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    def upload(self, path: str, data: bytes) -> str:
        relative = PurePosixPath(path)
        if relative.is_absolute() or ".." in relative.parts or not relative.parts:
            raise UploadError(f"Invalid object path: {path!r}")
        target = self.root.joinpath(*relative.parts)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as exc:
            logger.error("Upload of %s failed: %s", path, exc)
            raise UploadError(f"Upload failed: {exc}") from exc
        logger.info("Uploaded %d bytes to %s", len(data), relative)
        return f"{self.base_url}/{relative}"


def get_object_store() -> ObjectStore:
    return LocalObjectStore(settings.MEDIA_ROOT, settings.MEDIA_BASE_URL)
