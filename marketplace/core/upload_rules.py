"""Upload Rules - boundary validation for submission archives.

Invariants:
    - Only ZIP archives are accepted (content type OR `.zip` extension)
    - Payloads above the configured limit are rejected (default 50 MiB)
    - Empty payloads are rejected
    - Validation runs before any blob or row is written
"""

from pathlib import PurePath

from marketplace.core.outcomes import Rejection, invalid_payload

DEFAULT_MAX_UPLOAD_BYTES = 50 * 1024 * 1024

ARCHIVE_CONTENT_TYPES = frozenset({
    "application/zip",
    "application/x-zip-compressed",
})
ARCHIVE_EXTENSIONS = frozenset({".zip"})


def is_archive(filename: str | None, content_type: str | None) -> bool:
    if content_type and content_type.lower() in ARCHIVE_CONTENT_TYPES:
        return True
    if filename and PurePath(filename).suffix.lower() in ARCHIVE_EXTENSIONS:
        return True
    return False


def validate_archive_upload(
    filename: str | None,
    content_type: str | None,
    size: int,
    max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
) -> Rejection | None:
    """Return a rejection for a missing, non-ZIP, empty or oversized upload."""
    if not filename:
        return invalid_payload("ZIP file is required", code="FILE_REQUIRED")
    if not is_archive(filename, content_type):
        return invalid_payload("Only ZIP files are allowed", code="UNSUPPORTED_FILE_TYPE")
    if size <= 0:
        return invalid_payload("Uploaded file is empty", code="EMPTY_FILE")
    if size > max_bytes:
        return invalid_payload(
            f"File exceeds the {max_bytes // (1024 * 1024)} MiB limit",
            code="FILE_TOO_LARGE",
        )
    return None
