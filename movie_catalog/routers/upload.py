from fastapi import APIRouter, Depends, File, UploadFile

from movie_catalog.dependencies.storage import MediaStorage, get_storage
from movie_catalog.models.user import User
from movie_catalog.schemas.schemas import UploadResponse
from movie_catalog.services.user_service import get_current_user

router = APIRouter(prefix="/upload", tags=["Upload"])


@router.post("", response_model=UploadResponse)
async def upload_file(
    file: UploadFile = File(...),
    storage: MediaStorage = Depends(get_storage),
    _: User = Depends(get_current_user),
):
    """Uploads an avatar image and returns its public URL."""
    data = await file.read()
    url = await storage.upload(
        data,
        folder="avatars",
        filename=file.filename,
        content_type=file.content_type,
    )
    return {"url": url}
