"""Root conftest - shared test configuration."""

import os
import tempfile

# Never point tests at a real database or upload directory
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
os.environ.setdefault(
    "UPLOAD_DIR",
    os.path.join(tempfile.gettempdir(), "marketplace-test-uploads"),
)
os.environ.setdefault("LOG_FORMAT", "text")
