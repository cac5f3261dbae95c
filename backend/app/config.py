"""환경 변수 기반 애플리케이션 설정을 중앙에서 관리합니다."""

from pydantic_settings import BaseSettings
from typing import List, Optional
from pathlib import Path


class Settings(BaseSettings):
    APP_NAME: str = "PixForge 이미지 리사이즈 서비스"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]

    # Storage: "disk" (uploads/, resized/ 디렉터리) 또는 "memory" (요청/응답 payload로만 전달)
    STORAGE_MODE: str = "disk"
    UPLOAD_DIR: str = "uploads"
    RESIZED_DIR: str = "resized"

    # File upload
    MAX_UPLOAD_SIZE: int = 10 * 1024 * 1024  # 10 MB
    ALLOWED_MIME_TYPES: List[str] = ["image/jpeg", "image/png", "image/webp"]

    # Resize
    MAX_RESIZE_DIMENSION: Optional[int] = None  # None이면 크기 상한 없음
    RESIZE_TIMEOUT_SECONDS: float = 30.0
    JPEG_QUALITY: int = 95

    # 임시 파일 정리 주기
    RETENTION_MINUTES: int = 5
    SWEEP_INTERVAL_SECONDS: int = 2 * 60
    DOWNLOAD_DELETE_DELAY_SECONDS: float = 5.0

    class Config:
        # 실행 cwd와 무관하게 backend/.env를 로드한다.
        env_file = str(Path(__file__).resolve().parents[1] / ".env")


settings = Settings()
