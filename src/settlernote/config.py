"""Local configuration for settlernote."""

from __future__ import annotations

import os
from pathlib import Path


DEFAULT_MEDIA_DIR = "public/media"
DEFAULT_AUTOSAVE_DEBOUNCE_S = 2.0
DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024
DEFAULT_API_URL = "http://127.0.0.1:8000"
DEFAULT_HTTP_TIMEOUT_S = 10.0
DEFAULT_LOG_LEVEL = "INFO"

# Uploaded images are written here and served under /media/.
SETTLERNOTE_MEDIA_PATH = Path(os.getenv("SETTLERNOTE_MEDIA_PATH", DEFAULT_MEDIA_DIR)).expanduser().resolve()
SETTLERNOTE_AUTOSAVE_DEBOUNCE_S = float(
    os.getenv("SETTLERNOTE_AUTOSAVE_DEBOUNCE_S", str(DEFAULT_AUTOSAVE_DEBOUNCE_S))
)
SETTLERNOTE_MAX_UPLOAD_BYTES = int(os.getenv("SETTLERNOTE_MAX_UPLOAD_BYTES", str(DEFAULT_MAX_UPLOAD_BYTES)))
SETTLERNOTE_API_URL = os.getenv("SETTLERNOTE_API_URL", DEFAULT_API_URL)
SETTLERNOTE_HTTP_TIMEOUT_S = float(os.getenv("SETTLERNOTE_HTTP_TIMEOUT_S", str(DEFAULT_HTTP_TIMEOUT_S)))
SETTLERNOTE_AUTO_PROVISION_USERS = os.getenv("SETTLERNOTE_AUTO_PROVISION_USERS", "false").lower() == "true"
SETTLERNOTE_LOG_LEVEL = os.getenv("SETTLERNOTE_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()

ALLOWED_IMAGE_TYPES = frozenset({"image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"})
IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp")
