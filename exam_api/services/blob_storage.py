"""Blob storage for test assets (images, audio)."""
from __future__ import annotations

import logging
from pathlib import Path

from exam_api.config import BLOB_BASE_URL, BLOB_DIR
from exam_api.errors import StorageError
from exam_api.utils import safe_asset_path, write_bytes_atomic

log = logging.getLogger(__name__)


class BlobStorage:
    """Interface of a blob store addressed by slash-separated paths."""

    def upload(self, path: str, data: bytes, content_type: str) -> str:
        """Store `data` at `path` and return its durable URL."""
        raise NotImplementedError

    def delete(self, url: str) -> None:
        """Delete the blob behind a durable URL."""
        raise NotImplementedError

    def read(self, url: str) -> bytes | None:
        """Return blob bytes for a durable URL, or None if not stored here."""
        raise NotImplementedError

    def is_durable(self, url: str) -> bool:
        raise NotImplementedError


class LocalBlobStorage(BlobStorage):
    """Blobs stored as files under `root`, served at `base_url`."""

    def __init__(self, root: Path = BLOB_DIR, base_url: str = BLOB_BASE_URL):
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")
        self.root.mkdir(parents=True, exist_ok=True)

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path}"

    def path_for(self, blob_path: str) -> Path:
        """Resolve a blob path under the root; raises ValueError on traversal."""
        return safe_asset_path(self.root, blob_path)

    def _blob_path(self, url: str) -> str | None:
        prefix = f"{self.base_url}/"
        if not url.startswith(prefix):
            return None
        return url[len(prefix):]

    def is_durable(self, url: str) -> bool:
        return self._blob_path(url) is not None

    def upload(self, path: str, data: bytes, content_type: str) -> str:
        try:
            write_bytes_atomic(self.path_for(path), data)
        except (OSError, ValueError) as exc:
            raise StorageError(f"Failed to upload blob {path}") from exc
        log.debug("Stored blob %s (%s, %d bytes)", path, content_type, len(data))
        return self.url_for(path)

    def delete(self, url: str) -> None:
        blob_path = self._blob_path(url)
        if blob_path is None:
            raise StorageError(f"Not a blob URL of this storage: {url}")
        try:
            self.path_for(blob_path).unlink(missing_ok=True)
        except (OSError, ValueError) as exc:
            raise StorageError(f"Failed to delete blob {blob_path}") from exc

    def read(self, url: str) -> bytes | None:
        blob_path = self._blob_path(url)
        if blob_path is None:
            return None
        try:
            file_path = self.path_for(blob_path)
        except ValueError:
            return None
        if not file_path.is_file():
            return None
        return file_path.read_bytes()
