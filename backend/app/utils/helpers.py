from typing import Optional

from app.config import settings
from app.utils.errors import RejectReason, UploadRejected

IMAGE_CONTENT_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
}

MEDIA_TYPE_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}


def validate_upload(byte_length: int, media_type: Optional[str]) -> None:
    if byte_length > settings.MAX_UPLOAD_SIZE:
        raise UploadRejected(
            RejectReason.FILE_TOO_LARGE,
            f"File size exceeds {settings.MAX_UPLOAD_SIZE // (1024 * 1024)}MB limit",
        )
    if media_type not in settings.ALLOWED_MIME_TYPES:
        raise UploadRejected(
            RejectReason.UNSUPPORTED_TYPE,
            "Invalid file type. Only JPG, PNG, and WEBP are supported",
        )


def file_extension(file_name: Optional[str]) -> str:
    if not file_name or "." not in file_name:
        return ""
    return file_name.rsplit(".", 1)[-1].lower()


def content_type_for(file_name: str) -> str:
    return IMAGE_CONTENT_TYPES.get(file_extension(file_name), "application/octet-stream")


def resolve_extension(original_name: Optional[str], media_type: str) -> str:
    ext = file_extension(original_name)
    if ext in IMAGE_CONTENT_TYPES:
        return ext
    return MEDIA_TYPE_EXTENSIONS.get(media_type, "bin")
