"""Image upload to local disk."""
import logging
import os
import random
import time

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

import config
from security import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/upload", tags=["upload"])

CHUNK_SIZE = 64 * 1024


def _stored_filename(content_type: str) -> str:
    # Extension follows the checked content type, never the client filename
    ext = config.ALLOWED_IMAGE_TYPES[content_type]
    suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10 ** 9)}"
    return f"image-{suffix}{ext}"


@router.post("/image")
async def upload_image(
    image: UploadFile = File(None),
    current_user: dict = Depends(get_current_user),
):
    if image is None or not image.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded")

    if image.content_type not in config.ALLOWED_IMAGE_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid file type. Only JPEG, PNG, and WebP are allowed.",
        )

    os.makedirs(config.UPLOAD_PATH, exist_ok=True)
    filename = _stored_filename(image.content_type)
    path = os.path.join(config.UPLOAD_PATH, filename)

    size = 0
    too_large = False
    with open(path, "wb") as out:
        while True:
            chunk = await image.read(CHUNK_SIZE)
            if not chunk:
                break
            size += len(chunk)
            if size > config.MAX_FILE_SIZE:
                too_large = True
                break
            out.write(chunk)

    if too_large:
        os.remove(path)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="File too large")

    logger.info("User %s uploaded %s (%d bytes)", current_user["_id"], filename, size)
    return {
        "message": "File uploaded successfully",
        "url": f"/uploads/{filename}",
        "filename": filename,
        "original_name": image.filename,
        "size": size,
    }


@router.post("/s3", status_code=status.HTTP_501_NOT_IMPLEMENTED)
async def upload_s3(current_user: dict = Depends(get_current_user)):
    return {
        "message": "S3 upload not implemented yet",
        "note": "This endpoint is reserved for S3-compatible storage integration",
    }
