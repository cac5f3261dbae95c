"""이미지 서비스 공용 예외 계층과 FastAPI 예외 핸들러를 정의합니다."""

import logging
from enum import Enum

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ImageServiceError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ImageServiceError):
    status_code = status.HTTP_400_BAD_REQUEST


class RejectReason(str, Enum):
    FILE_TOO_LARGE = "FileTooLarge"
    UNSUPPORTED_TYPE = "UnsupportedType"


class UploadRejected(ValidationError):
    def __init__(self, reason: RejectReason, message: str):
        super().__init__(message)
        self.reason = reason


class NotFoundError(ImageServiceError):
    status_code = status.HTTP_404_NOT_FOUND


class ProcessingError(ImageServiceError):
    pass


class InternalError(ImageServiceError):
    pass


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def handle_image_service_error(request: Request, exc: ImageServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("[error] %s %s failed: %s", request.method, request.url.path, exc.message)
    return _error_response(exc.status_code, exc.message)


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        message = "Invalid request"
    return _error_response(status.HTTP_400_BAD_REQUEST, message)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    # 내부 오류 상세는 로그에만 남기고 호출자에게는 일반 메시지를 반환한다.
    logger.exception("[error] unhandled exception on %s %s", request.method, request.url.path)
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ImageServiceError, handle_image_service_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
