"""User endpoints for the API."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from settlernote.exceptions import ValidationError
from settlernote.utils.logging_config import get_logger
from server.dependencies import CurrentUser, StoreDep
from server.models import UserUpdateRequest, UserUpdateResponse
from server.server_config import USER_UPDATED_MESSAGE

logger = get_logger(__name__)

router = APIRouter(prefix="/api/user", tags=["users"])


@router.put("/update", response_model=UserUpdateResponse)
async def update_user(store: StoreDep, user: CurrentUser, body: UserUpdateRequest) -> UserUpdateResponse | JSONResponse:
    """Rename the signed-in user.

    A blank name is answered with **400** and a ``{"message": ...}`` body,
    the shape the profile form displays.
    """
    try:
        updated = store.update_user_name(user.email or "", body.name)
    except ValidationError as exc:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"message": str(exc)})
    logger.info("User updated", extra={"user_id": updated.id})
    return UserUpdateResponse(message=USER_UPDATED_MESSAGE, user=updated)
