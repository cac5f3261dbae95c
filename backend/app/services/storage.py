"""임시 이미지 저장소 어댑터입니다. 디스크 저장과 무상태(pass-through) 저장을 같은 계약으로 제공합니다."""

import logging
import os
import re
import time
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from app.config import Settings
from app.utils.errors import NotFoundError
from app.utils.helpers import resolve_extension

logger = logging.getLogger(__name__)

SAFE_FILE_NAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


class StorageArea(str, Enum):
    INCOMING = "uploads"
    DERIVED = "resized"

    @property
    def url_prefix(self) -> str:
        return f"/{self.value}"


@dataclass(frozen=True)
class StoredFile:
    file_id: str
    file_name: str
    original_name: str
    media_type: str
    area: StorageArea
    created_at: datetime
    url: Optional[str] = None
    data: Optional[bytes] = None


def _new_file_name(original_name: str, media_type: str) -> Tuple[str, str]:
    file_id = str(uuid.uuid4())
    return file_id, f"{file_id}.{resolve_extension(original_name, media_type)}"


class ImageStorage(ABC):
    """업로드 원본(INCOMING)과 리사이즈 결과(DERIVED) 두 영역을 관리하는 저장소 계약"""

    mode: str = ""

    @abstractmethod
    def save(self, area: StorageArea, original_name: str, media_type: str, data: bytes) -> StoredFile:
        ...

    @abstractmethod
    def read(self, area: StorageArea, file_name: str) -> bytes:
        """파일이 없으면 NotFoundError를 발생시킵니다."""

    @abstractmethod
    def delete(self, area: StorageArea, file_name: str) -> bool:
        """삭제했으면 True, 이미 없던 파일이면 False (오류 아님)."""

    @abstractmethod
    def list_with_age(self, area: StorageArea) -> List[Tuple[str, int]]:
        """(file_name, age_ms) 목록. Janitor 전용."""


class DiskStorage(ImageStorage):
    mode = "disk"

    def __init__(self, upload_dir: str, resized_dir: str, clock: Callable[[], float] = time.time):
        self._dirs: Dict[StorageArea, str] = {
            StorageArea.INCOMING: upload_dir,
            StorageArea.DERIVED: resized_dir,
        }
        self._clock = clock

    def area_dir(self, area: StorageArea) -> str:
        return self._dirs[area]

    def _path_for(self, area: StorageArea, file_name: str) -> Optional[str]:
        # 영역 디렉터리는 평면 구조이므로 단일 경로 요소만 허용한다.
        if not file_name or not SAFE_FILE_NAME_RE.match(file_name):
            return None
        return os.path.join(self._dirs[area], file_name)

    def save(self, area: StorageArea, original_name: str, media_type: str, data: bytes) -> StoredFile:
        folder = self._dirs[area]
        os.makedirs(folder, exist_ok=True)

        file_id, file_name = _new_file_name(original_name, media_type)
        path = os.path.join(folder, file_name)
        with open(path, "wb") as f:
            f.write(data)

        logger.info("[storage] saved %s/%s (%d bytes)", area.value, file_name, len(data))
        return StoredFile(
            file_id=file_id,
            file_name=file_name,
            original_name=original_name,
            media_type=media_type,
            area=area,
            created_at=datetime.now(timezone.utc),
            url=f"{area.url_prefix}/{file_name}",
        )

    def read(self, area: StorageArea, file_name: str) -> bytes:
        path = self._path_for(area, file_name)
        if path is None or not os.path.isfile(path):
            raise NotFoundError("File not found")
        with open(path, "rb") as f:
            return f.read()

    def delete(self, area: StorageArea, file_name: str) -> bool:
        path = self._path_for(area, file_name)
        if path is None:
            return False
        try:
            os.remove(path)
        except FileNotFoundError:
            return False
        logger.info("[storage] deleted %s/%s", area.value, file_name)
        return True

    def list_with_age(self, area: StorageArea) -> List[Tuple[str, int]]:
        folder = self._dirs[area]
        if not os.path.isdir(folder):
            return []

        now = self._clock()
        entries: List[Tuple[str, int]] = []
        with os.scandir(folder) as it:
            for entry in it:
                if not entry.is_file():
                    continue
                try:
                    modified = entry.stat().st_mtime
                except FileNotFoundError:
                    # 동시에 실행된 다른 정리 작업이 먼저 지운 경우
                    continue
                entries.append((entry.name, max(0, int((now - modified) * 1000))))
        return entries


class PassThroughStorage(ImageStorage):
    """쓰기 가능한 디스크가 없는 배포용. 바이트는 요청/응답 payload로만 오간다."""

    mode = "memory"

    def save(self, area: StorageArea, original_name: str, media_type: str, data: bytes) -> StoredFile:
        file_id, file_name = _new_file_name(original_name, media_type)
        return StoredFile(
            file_id=file_id,
            file_name=file_name,
            original_name=original_name,
            media_type=media_type,
            area=area,
            created_at=datetime.now(timezone.utc),
            data=data,
        )

    def read(self, area: StorageArea, file_name: str) -> bytes:
        raise NotFoundError("File not found")

    def delete(self, area: StorageArea, file_name: str) -> bool:
        return False

    def list_with_age(self, area: StorageArea) -> List[Tuple[str, int]]:
        return []


def build_storage(settings: Settings) -> ImageStorage:
    mode = (settings.STORAGE_MODE or "disk").strip().lower()
    if mode == "disk":
        return DiskStorage(settings.UPLOAD_DIR, settings.RESIZED_DIR)
    if mode == "memory":
        return PassThroughStorage()
    raise ValueError(f"Invalid STORAGE_MODE: {settings.STORAGE_MODE}. Must be one of ['disk', 'memory']")
