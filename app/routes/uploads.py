# app/routes/uploads.py
from fastapi import APIRouter, Depends, HTTPException, Request, status
from starlette.datastructures import UploadFile
from pydantic import BaseModel
import logging
from app.auth.dependencies import require_admin
from app.auth.models import AdminIdentity
from app.config import settings
from app.newsletter.exceptions import ImageUploadError
from app.services.storage_service import StorageService, storage_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/uploads", tags=["uploads"])

# The visual editor's asset manager posts either field name
IMAGE_FIELDS = ("image", "image[]")

class UploadResponse(BaseModel):
    url: str

def get_storage_service() -> StorageService:
    return storage_service

@router.post("", response_model=UploadResponse)
async def upload_image(
    request: Request,
    admin: AdminIdentity = Depends(require_admin),
    storage: StorageService = Depends(get_storage_service)
):
    """Host an editor image and return its URL"""
    form = await request.form()
    upload = next(
        (form.get(field) for field in IMAGE_FIELDS if isinstance(form.get(field), UploadFile)),
        None
    )
    if upload is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded")

    # Never buffer more than the cap plus one byte
    data = await upload.read(settings.max_upload_bytes + 1)
    if not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded")
    if len(data) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"Image exceeds {settings.max_upload_bytes} bytes"
        )

    try:
        url = await storage.upload_image(data, filename=upload.filename, content_type=upload.content_type)
    except ImageUploadError as e:
        logger.error(f"Upload failed for {upload.filename}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Upload failed"
        )

    logger.info(f"Image {upload.filename} uploaded by {admin.email}: {url}")
    return UploadResponse(url=url)
