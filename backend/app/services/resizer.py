"""Pillow 기반 이미지 리사이즈 호출 계층입니다. 기본 경로 실패 시 보조 경로로 한 번 재시도합니다."""

import asyncio
import io
import logging
from typing import Callable, Optional, Tuple

from PIL import Image

from app.config import settings
from app.utils.errors import ProcessingError, ValidationError

logger = logging.getLogger(__name__)

PILLOW_FORMATS = {
    "image/jpeg": "JPEG",
    "image/png": "PNG",
    "image/webp": "WEBP",
}

ResizeFn = Callable[[bytes, str, int, int], bytes]


def compute_percentage_size(width: int, height: int, percentage: int) -> Tuple[int, int]:
    # 정수 연산으로 half-up 반올림 (float round는 banker's rounding)
    new_width = (width * percentage * 2 + 100) // 200
    new_height = (height * percentage * 2 + 100) // 200
    return max(1, new_width), max(1, new_height)


def _save_kwargs(fmt: str) -> dict:
    if fmt == "JPEG":
        return {"format": fmt, "quality": settings.JPEG_QUALITY}
    return {"format": fmt}


SAVEABLE_MODES = {
    "JPEG": ("RGB", "L", "CMYK"),
    "PNG": ("1", "L", "LA", "I", "P", "RGB", "RGBA"),
    "WEBP": ("RGB", "RGBA"),
}


def _fit_mode(img: Image.Image, fmt: str) -> Image.Image:
    if img.mode in SAVEABLE_MODES[fmt]:
        return img
    if fmt != "JPEG" and ("A" in img.mode or "transparency" in img.info):
        return img.convert("RGBA")
    return img.convert("RGB")


def resize_with_lanczos(data: bytes, media_type: str, width: int, height: int) -> bytes:
    # 출력 포맷은 원본 디코딩 결과가 아니라 파일 확장자(media_type)를 따른다.
    fmt = PILLOW_FORMATS[media_type]
    with Image.open(io.BytesIO(data)) as img:
        resized = _fit_mode(img, fmt).resize((width, height), Image.Resampling.LANCZOS)
        out_buffer = io.BytesIO()
        resized.save(out_buffer, **_save_kwargs(fmt))
        return out_buffer.getvalue()


def resize_with_normalized_mode(data: bytes, media_type: str, width: int, height: int) -> bytes:
    fmt = PILLOW_FORMATS.get(media_type, "PNG")
    with Image.open(io.BytesIO(data)) as img:
        img.load()
        has_alpha = img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info)
        if fmt == "JPEG" or not has_alpha:
            normalized = img.convert("RGB")
        else:
            normalized = img.convert("RGBA")
        resized = normalized.resize((width, height), Image.Resampling.BICUBIC)
        out_buffer = io.BytesIO()
        resized.save(out_buffer, **_save_kwargs(fmt))
        return out_buffer.getvalue()


class ImageResizer:
    """fill 방식 리사이즈. 출력은 항상 요청한 width x height와 정확히 일치합니다."""

    def __init__(
        self,
        primary: ResizeFn = resize_with_lanczos,
        fallback: Optional[ResizeFn] = resize_with_normalized_mode,
        timeout_seconds: Optional[float] = None,
    ):
        self.primary = primary
        self.fallback = fallback
        self.timeout_seconds = timeout_seconds if timeout_seconds is not None else settings.RESIZE_TIMEOUT_SECONDS

    @staticmethod
    def read_dimensions(data: bytes) -> Tuple[int, int]:
        try:
            with Image.open(io.BytesIO(data)) as img:
                width, height = img.size
        except Exception as exc:
            logger.warning("[resize] could not read image header: %s", exc)
            raise ValidationError("Could not determine image dimensions")
        if not width or not height:
            raise ValidationError("Could not determine image dimensions")
        return width, height

    def resize(self, data: bytes, media_type: str, width: int, height: int) -> bytes:
        if width <= 0 or height <= 0:
            raise ValidationError("Width and height must be positive integers")

        try:
            return self.primary(data, media_type, width, height)
        except Exception as exc:
            logger.warning("[resize] primary resize failed (%s), trying fallback: %s", media_type, exc)

        if self.fallback is not None:
            try:
                return self.fallback(data, media_type, width, height)
            except Exception as exc:
                logger.error("[resize] fallback resize failed (%s): %s", media_type, exc)

        raise ProcessingError("Failed to resize image")

    async def resize_async(self, data: bytes, media_type: str, width: int, height: int) -> bytes:
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self.resize, data, media_type, width, height),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.error("[resize] resize timed out after %.1fs (%dx%d)", self.timeout_seconds, width, height)
            raise ProcessingError("Failed to resize image")
