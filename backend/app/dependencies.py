"""라우터와 미들웨어가 공유하는 저장소/리사이저/Janitor 의존성입니다. 실제 인스턴스는 app.state에 보관합니다."""

from fastapi import Request

from app.services.janitor import Janitor
from app.services.resizer import ImageResizer
from app.services.storage import ImageStorage


def get_storage(request: Request) -> ImageStorage:
    return request.app.state.storage


def get_resizer(request: Request) -> ImageResizer:
    return request.app.state.resizer


def get_janitor(request: Request) -> Janitor:
    return request.app.state.janitor
