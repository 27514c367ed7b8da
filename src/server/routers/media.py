"""Media endpoints for the API."""

from fastapi import APIRouter, File, UploadFile

from settlernote.utils.logging_config import get_logger
from server.dependencies import CurrentUser, MediaDep
from server.models import ErrorResponse, MediaListResponse, UploadResponse

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["media"])


@router.get("/media", response_model=MediaListResponse)
async def list_media(media: MediaDep) -> MediaListResponse:
    """List every uploaded image with its public URL."""
    return MediaListResponse(images=await media.list())


@router.post(
    "/upload",
    response_model=UploadResponse,
    responses={400: {"model": ErrorResponse, "description": "Not an image, or too large"}},
)
async def upload_media(media: MediaDep, user: CurrentUser, file: UploadFile = File(...)) -> UploadResponse:
    """Store an uploaded image and return the URL it is served from.

    **Parameters**

    - **file** (`UploadFile`): multipart image field named ``file``

    **Returns**

    - **UploadResponse**: ``{"url": "/media/<md5>.<ext>"}``
    """
    data = await file.read()
    item = await media.upload(file.filename or "", data, file.content_type)
    logger.debug("Upload stored", extra={"media_name": item.name, "user_id": user.id})
    return UploadResponse(url=item.url)
