"""FastAPI application for settlernote."""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from settlernote.config import SETTLERNOTE_AUTO_PROVISION_USERS
from settlernote.exceptions import (
    DocumentNotFoundError,
    PermissionDeniedError,
    PositionError,
    SettlernoteError,
    TransientNetworkError,
    UnauthorizedError,
    ValidationError,
)
from settlernote.media import MediaStore
from settlernote.store import DocumentStore
from settlernote.utils.logging_config import get_logger
from server.routers import documents, media, users
from server.server_config import APP_DESCRIPTION, APP_TITLE, APP_VERSION, MEDIA_MOUNT_PATH

logger = get_logger(__name__)

ERROR_STATUS: dict[type[SettlernoteError], int] = {
    UnauthorizedError: status.HTTP_401_UNAUTHORIZED,
    PermissionDeniedError: status.HTTP_403_FORBIDDEN,
    DocumentNotFoundError: status.HTTP_404_NOT_FOUND,
    ValidationError: status.HTTP_400_BAD_REQUEST,
    PositionError: status.HTTP_400_BAD_REQUEST,
    TransientNetworkError: status.HTTP_502_BAD_GATEWAY,
}


def status_for(exc: SettlernoteError) -> int:
    """HTTP status for a library exception (500 for anything unmapped)."""
    for exc_type, code in ERROR_STATUS.items():
        if isinstance(exc, exc_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def _settlernote_error_handler(request: Request, exc: SettlernoteError) -> JSONResponse:
    code = status_for(exc)
    log = logger.warning if code >= status.HTTP_500_INTERNAL_SERVER_ERROR else logger.info
    log(
        "Request failed",
        extra={"path": request.url.path, "status_code": code, "error": str(exc)},
    )
    return JSONResponse(status_code=code, content={"error": str(exc)})


def create_app(
    store: DocumentStore | None = None,
    media_store: MediaStore | None = None,
    *,
    auto_provision_users: bool = SETTLERNOTE_AUTO_PROVISION_USERS,
) -> FastAPI:
    """Build the application around a document store and a media directory.

    Args:
        store: Users, documents and shares; a fresh in-memory store by default.
        media_store: Image storage; the configured media directory by default.
        auto_provision_users: Create users on their first request instead of
            answering 404 for unknown session emails.

    Returns:
        The configured application.
    """
    app = FastAPI(title=APP_TITLE, version=APP_VERSION, description=APP_DESCRIPTION)
    app.state.store = store if store is not None else DocumentStore()
    app.state.media = media_store if media_store is not None else MediaStore()
    app.state.auto_provision_users = auto_provision_users

    app.add_exception_handler(SettlernoteError, _settlernote_error_handler)

    app.include_router(documents.router)
    app.include_router(media.router)
    app.include_router(users.router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    app.mount(
        MEDIA_MOUNT_PATH,
        StaticFiles(directory=app.state.media.root, check_dir=False),
        name="media",
    )
    return app


app = create_app()
