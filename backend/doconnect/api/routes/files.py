"""File Routes — serve stored images by id or by stored name, delete by id.

Invariants:
    - GET /file/{id} and GET /files/{name} are anonymous
    - Names that are not a plain file inside the upload directory give 404
"""

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import FileResponse

from doconnect.api.dependencies import get_current_user, get_file_service
from doconnect.models.user import User
from doconnect.services.file_service import FileService

router = APIRouter(prefix="/api/v1", tags=["files"])


@router.get("/file/{image_id}")
async def get_image(
    image_id: int, service: FileService = Depends(get_file_service),
):
    image, path = await service.get_image(image_id)
    return FileResponse(path, media_type=image.content_type, filename=image.file_name)


@router.get("/files/{file_name}")
async def get_file_by_name(
    file_name: str, service: FileService = Depends(get_file_service),
):
    path, content_type = service.resolve_stored(file_name)
    return FileResponse(path, media_type=content_type)


@router.delete("/file/{image_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_image(
    image_id: int,
    user: User = Depends(get_current_user),
    service: FileService = Depends(get_file_service),
):
    await service.delete_image(image_id, user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
