"""Request dependencies: the shared stores and the signed-in user."""

from typing import Annotated

from fastapi import Depends, Header, Request

from settlernote.exceptions import UnauthorizedError
from settlernote.media import MediaStore
from settlernote.schemas import UserSummary
from settlernote.store import DocumentStore
from settlernote.utils.logging_config import get_logger
from server.server_config import SESSION_HEADER

logger = get_logger(__name__)


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


def get_media(request: Request) -> MediaStore:
    return request.app.state.media


def get_current_user(
    request: Request,
    store: Annotated[DocumentStore, Depends(get_store)],
    email: Annotated[str | None, Header(alias=SESSION_HEADER)] = None,
) -> UserSummary:
    """Resolve the session email to a user.

    The session provider sits in front of the server and forwards the
    signed-in email. Without it the request is unauthorized; an unknown
    email is a missing user unless auto-provisioning is enabled.
    """
    if not email or not email.strip():
        logger.debug("Request without session", extra={"path": request.url.path})
        raise UnauthorizedError("Unauthorized")
    email = email.strip()
    if request.app.state.auto_provision_users:
        return store.add_user(email)
    return store.get_user_by_email(email)


StoreDep = Annotated[DocumentStore, Depends(get_store)]
MediaDep = Annotated[MediaStore, Depends(get_media)]
CurrentUser = Annotated[UserSummary, Depends(get_current_user)]
