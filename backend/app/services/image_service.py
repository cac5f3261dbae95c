"""Image 도메인 서비스 레이어입니다. 업로드 → 리사이즈 → 다운로드 → 정리 흐름을 저장소 계약 위에서 조립합니다."""

import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from app.config import settings
from app.schemas.image import ResizeRequest
from app.services.janitor import Janitor
from app.services.resizer import ImageResizer, compute_percentage_size
from app.services.storage import ImageStorage, StorageArea, StoredFile
from app.utils.errors import ValidationError
from app.utils.helpers import IMAGE_CONTENT_TYPES, content_type_for, file_extension, validate_upload

logger = logging.getLogger(__name__)

RESIZE_TYPE_RATIO = "ratio"
RESIZE_TYPE_PERCENTAGE = "percentage"
MIN_PERCENTAGE = 10
MAX_PERCENTAGE = 100


@dataclass(frozen=True)
class ResizeResult:
    stored: StoredFile
    original_name: str
    width: int
    height: int


def encode_payload(data: Optional[bytes]) -> Optional[str]:
    if data is None:
        return None
    return base64.b64encode(data).decode("ascii")


def decode_payload(payload: str) -> bytes:
    if "," in payload and payload.startswith("data:"):
        payload = payload.split(",", 1)[1]
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError("fileData must be base64 encoded")


def upload_image(storage: ImageStorage, original_name: str, media_type: Optional[str], data: bytes) -> StoredFile:
    validate_upload(len(data), media_type)
    return storage.save(StorageArea.INCOMING, original_name, media_type, data)


def _target_size(request: ResizeRequest, original_width: int, original_height: int) -> Tuple[int, int]:
    if request.resize_type == RESIZE_TYPE_RATIO:
        if not request.width or not request.height or request.width <= 0 or request.height <= 0:
            raise ValidationError("Width and height are required for ratio resize")
        width, height = request.width, request.height
    elif request.resize_type == RESIZE_TYPE_PERCENTAGE:
        if request.percentage is None or not MIN_PERCENTAGE <= request.percentage <= MAX_PERCENTAGE:
            raise ValidationError(f"Percentage must be between {MIN_PERCENTAGE} and {MAX_PERCENTAGE}")
        width, height = compute_percentage_size(original_width, original_height, request.percentage)
    else:
        raise ValidationError("Invalid resize type")

    limit = settings.MAX_RESIZE_DIMENSION
    if limit is not None and (width > limit or height > limit):
        raise ValidationError(f"Width and height must not exceed {limit} pixels")
    return width, height


async def resize_uploaded_image(storage: ImageStorage, resizer: ImageResizer, request: ResizeRequest) -> ResizeResult:
    if not request.file_name:
        raise ValidationError("No file specified")

    media_type = IMAGE_CONTENT_TYPES.get(file_extension(request.file_name))
    if media_type is None:
        raise ValidationError("Invalid file type. Only JPG, PNG, and WEBP are supported")

    if request.file_data:
        # 인라인 payload는 업로드 경로를 거치지 않으므로 같은 검증을 여기서 적용한다.
        source = decode_payload(request.file_data)
        validate_upload(len(source), media_type)
    else:
        source = storage.read(StorageArea.INCOMING, request.file_name)

    original_width, original_height = resizer.read_dimensions(source)
    width, height = _target_size(request, original_width, original_height)

    resized = await resizer.resize_async(source, media_type, width, height)
    stored = storage.save(StorageArea.DERIVED, request.file_name, media_type, resized)
    logger.info(
        "[resize] %s %dx%d -> %s %dx%d",
        request.file_name,
        original_width,
        original_height,
        stored.file_name,
        width,
        height,
    )
    return ResizeResult(stored=stored, original_name=request.file_name, width=width, height=height)


def load_resized_image(storage: ImageStorage, file_name: str) -> Tuple[bytes, str]:
    if not file_name:
        raise ValidationError("No file specified")
    return storage.read(StorageArea.DERIVED, file_name), content_type_for(file_name)


def cleanup_files(janitor: Janitor, uploaded_file: Optional[str] = None, resized_file: Optional[str] = None) -> str:
    if uploaded_file or resized_file:
        if uploaded_file:
            janitor.delete_named(StorageArea.INCOMING, uploaded_file)
        if resized_file:
            janitor.delete_named(StorageArea.DERIVED, resized_file)
        return "Files cleaned up successfully"

    janitor.sweep_all()
    return "Cleanup completed successfully"
