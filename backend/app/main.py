"""FastAPI 애플리케이션 진입점. 미들웨어, 예외 핸들러, API 라우터, 업로드 정적 서빙을 등록합니다."""

import logging
import os
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.config import settings
from app.middleware.sweep_middleware import opportunistic_sweep
from app.routers import images
from app.services.janitor import Janitor
from app.services.resizer import ImageResizer
from app.services.storage import DiskStorage, ImageStorage, build_storage
from app.utils.errors import register_exception_handlers

logging.basicConfig(level=settings.LOG_LEVEL.upper())

app = FastAPI(
    title="PixForge 이미지 리사이즈 서비스",
    description="이미지를 업로드해 원하는 크기로 변환하고, 임시 파일은 짧은 보존 기간 뒤 자동 삭제합니다.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.middleware("http")(opportunistic_sweep)
register_exception_handlers(app)

# Register all routers
app.include_router(images.router)
app.include_router(images.preview_router)


def configure_services(target: FastAPI, storage: Optional[ImageStorage] = None) -> None:
    # 저장소 구현은 프로세스 시작 시 한 번만 선택하고, 이후 계층은 어떤 구현인지 알지 못한다.
    storage = storage or build_storage(settings)
    target.state.storage = storage
    target.state.resizer = ImageResizer()
    target.state.janitor = Janitor(storage)


configure_services(app)


@app.get("/api/health")
def health_check(request: Request):
    return {"status": "ok", "service": settings.APP_NAME, "storage_mode": request.app.state.storage.mode}


# Static file serving for uploads
if isinstance(app.state.storage, DiskStorage):
    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
