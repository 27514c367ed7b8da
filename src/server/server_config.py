"""Configuration for the server."""

from __future__ import annotations

from typing import Final

APP_TITLE: Final[str] = "settlernote"
APP_VERSION: Final[str] = "0.1.0"
APP_DESCRIPTION: Final[str] = "Nested rich-text documents with outlines, child links and auto-save."

SESSION_HEADER: Final[str] = "X-User-Email"
MEDIA_MOUNT_PATH: Final[str] = "/media"

USER_UPDATED_MESSAGE: Final[str] = "User updated successfully"
