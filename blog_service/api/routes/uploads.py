"""
Upload routes
"""
from fastapi import APIRouter, Depends

from blog_service.schemas import UploadURLResponse
from blog_service.infrastructure.storage import StorageManager
from blog_service.api.dependencies import get_storage


router = APIRouter(tags=["Media"])


@router.get("/get-upload-url", response_model=UploadURLResponse)
async def get_upload_url(storage: StorageManager = Depends(get_storage)):
    """Pre-signed URL for uploading a JPEG image straight to storage"""
    return UploadURLResponse(uploadURL=storage.generate_upload_url())
