"""Local Blob Store - submission archives on the local filesystem.

Invariants:
    - A handle is a bare file name inside the upload root, never a path
    - Handles that would resolve outside the root are refused
    - delete() of a missing blob is a no-op (release after commit may race a retry)

Design Decisions:
    - `{uuid}__{sanitized name}` file names: unique per save, still readable on disk
"""

import logging
import re
import uuid
from pathlib import Path

from marketplace.core.domain_types import BlobHandle
from marketplace.core.errors import BlobStorageError, ResourceNotFoundError

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9._-]+")


class LocalBlobStore:
    """BlobStore implementation rooted at `upload_dir`."""

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def save(self, data: bytes, suggested_name: str) -> BlobHandle:
        safe_name = _UNSAFE_CHARS.sub("_", suggested_name or "upload.zip")
        handle = BlobHandle(f"{uuid.uuid4().hex}__{safe_name}")
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            (self.root / handle).write_bytes(data)
        except OSError as e:
            logger.error(f"Blob write failed: {e}")
            raise BlobStorageError("Could not store uploaded file")
        return handle

    def delete(self, handle: BlobHandle) -> None:
        try:
            self.path(handle).unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Blob delete failed for {handle}: {e}")

    def read(self, handle: BlobHandle) -> bytes:
        try:
            return self.path(handle).read_bytes()
        except FileNotFoundError:
            raise ResourceNotFoundError("File", handle)

    def path(self, handle: BlobHandle) -> Path:
        candidate = (self.root / handle).resolve()
        if candidate.parent != self.root.resolve():
            raise BlobStorageError(f"Invalid blob handle: {handle}")
        return candidate
