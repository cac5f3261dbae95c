"""Images 기능 API 라우터입니다. 요청을 검증하고 서비스 레이어로 비즈니스 로직을 위임합니다."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Response, UploadFile
from fastapi.concurrency import run_in_threadpool

from app.dependencies import get_janitor, get_resizer, get_storage
from app.schemas.image import CleanupOut, CleanupRequest, ResizedImageOut, ResizeRequest, UploadedImageOut
from app.services import image_service
from app.services.janitor import Janitor
from app.services.resizer import ImageResizer
from app.services.storage import ImageStorage, StorageArea
from app.utils.errors import ImageServiceError, InternalError, ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["images"])

# 프록시 rewrite(/resized/* -> /api/resized/*) 없이도 미리보기 URL이 동작하도록 별도 노출한다.
preview_router = APIRouter(tags=["images"])

PREVIEW_CACHE_CONTROL = "public, max-age=300"


@router.post("/upload", response_model=UploadedImageOut, response_model_exclude_none=True)
async def upload_image(
    file: Optional[UploadFile] = File(None),
    storage: ImageStorage = Depends(get_storage),
):
    if file is None or not file.filename:
        raise ValidationError("No file provided")

    try:
        content = await file.read()
        stored = image_service.upload_image(storage, file.filename, file.content_type, content)
    except ImageServiceError:
        raise
    except Exception:
        logger.exception("[upload] failed to store %s", file.filename)
        raise InternalError("Failed to upload file")

    return UploadedImageOut(
        file_id=stored.file_id,
        file_name=stored.file_name,
        original_name=stored.original_name,
        file_type=stored.media_type,
        file_path=stored.url,
        file_data=image_service.encode_payload(stored.data),
    )


@router.post("/resize", response_model=ResizedImageOut, response_model_exclude_none=True)
async def resize_image(
    payload: ResizeRequest,
    storage: ImageStorage = Depends(get_storage),
    resizer: ImageResizer = Depends(get_resizer),
):
    try:
        result = await image_service.resize_uploaded_image(storage, resizer, payload)
    except ImageServiceError:
        raise
    except Exception:
        logger.exception("[resize] failed to resize %s", payload.file_name)
        raise InternalError("Failed to resize image")

    return ResizedImageOut(
        resized_file_name=result.stored.file_name,
        original_name=result.original_name,
        resized_path=result.stored.url,
        resized_data=image_service.encode_payload(result.stored.data),
        width=result.width,
        height=result.height,
    )


@router.get("/download/{file_name}")
async def download_image(
    file_name: str,
    storage: ImageStorage = Depends(get_storage),
    janitor: Janitor = Depends(get_janitor),
):
    try:
        content, content_type = image_service.load_resized_image(storage, file_name)
        janitor.schedule_delete(StorageArea.DERIVED, file_name)
    except ImageServiceError:
        raise
    except Exception:
        logger.exception("[download] failed to read %s", file_name)
        raise InternalError("Failed to download file")

    return Response(
        content=content,
        media_type=content_type,
        headers={"Content-Disposition": f'attachment; filename="{file_name}"'},
    )


@router.get("/resized/{file_path:path}")
@preview_router.get("/resized/{file_path:path}")
async def serve_resized_image(file_path: str, storage: ImageStorage = Depends(get_storage)):
    try:
        content, content_type = image_service.load_resized_image(storage, file_path)
    except ImageServiceError:
        raise
    except Exception:
        logger.exception("[preview] failed to read %s", file_path)
        raise InternalError("Failed to serve file")

    return Response(content=content, media_type=content_type, headers={"Cache-Control": PREVIEW_CACHE_CONTROL})


@router.post("/cleanup", response_model=CleanupOut)
async def cleanup_images(
    payload: Optional[CleanupRequest] = None,
    janitor: Janitor = Depends(get_janitor),
):
    payload = payload or CleanupRequest()
    try:
        message = await run_in_threadpool(
            image_service.cleanup_files, janitor, payload.uploaded_file, payload.resized_file
        )
    except ImageServiceError:
        raise
    except Exception:
        logger.exception("[cleanup] cleanup request failed")
        raise InternalError("Failed to clean up temporary files")

    return CleanupOut(message=message)
