"""임시 이미지 정리(Janitor) 서비스입니다.

보존 기간(RETENTION_MINUTES)을 넘긴 파일을 영역별로 삭제하고, 다운로드가 끝난 파일은
지정 시간 뒤에 개별 삭제합니다. 세 가지 트리거(정리 API, 요청 전 주기 점검, 다운로드 후 지연 삭제)는
모두 ``sweep_all`` / ``delete_named`` 하나의 경로를 사용합니다.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Set

from app.config import settings
from app.services.storage import ImageStorage, StorageArea

logger = logging.getLogger(__name__)


@dataclass
class SweepResult:
    dry_run: bool = False
    scanned_count: int = 0
    expired: List[str] = field(default_factory=list)
    deleted_count: int = 0
    failed_count: int = 0


class Janitor:
    def __init__(
        self,
        storage: ImageStorage,
        retention_minutes: Optional[int] = None,
        sweep_interval_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.storage = storage
        self.retention_minutes = retention_minutes if retention_minutes is not None else settings.RETENTION_MINUTES
        self.sweep_interval_seconds = (
            sweep_interval_seconds if sweep_interval_seconds is not None else settings.SWEEP_INTERVAL_SECONDS
        )
        self._clock = clock
        self._last_sweep_at = clock()
        self._pending: Set[asyncio.Task] = set()

    @property
    def retention_ms(self) -> int:
        return self.retention_minutes * 60_000

    def sweep_all(self, dry_run: bool = False) -> SweepResult:
        result = SweepResult(dry_run=dry_run)
        for area in StorageArea:
            self._sweep_area(area, result)

        if result.expired:
            logger.info(
                "[janitor] sweep finished: scanned=%d expired=%d deleted=%d failed=%d dry_run=%s",
                result.scanned_count,
                len(result.expired),
                result.deleted_count,
                result.failed_count,
                dry_run,
            )
        return result

    def _sweep_area(self, area: StorageArea, result: SweepResult) -> None:
        try:
            entries = self.storage.list_with_age(area)
        except Exception as exc:
            logger.warning("[janitor] failed to list %s: %s", area.value, exc)
            result.failed_count += 1
            return

        result.scanned_count += len(entries)
        for file_name, age_ms in entries:
            if age_ms <= self.retention_ms:
                continue
            result.expired.append(f"{area.value}/{file_name}")
            if result.dry_run:
                continue
            try:
                if self.storage.delete(area, file_name):
                    result.deleted_count += 1
            except Exception as exc:
                result.failed_count += 1
                logger.warning("[janitor] failed to delete %s/%s: %s", area.value, file_name, exc)

    def delete_named(self, area: StorageArea, file_name: str) -> bool:
        try:
            return self.storage.delete(area, file_name)
        except Exception as exc:
            logger.warning("[janitor] failed to delete %s/%s: %s", area.value, file_name, exc)
            return False

    def maybe_sweep(self) -> bool:
        now = self._clock()
        if now - self._last_sweep_at <= self.sweep_interval_seconds:
            return False
        self._last_sweep_at = now
        self.sweep_all()
        return True

    async def delete_later(self, area: StorageArea, file_name: str, delay_seconds: float) -> bool:
        try:
            if delay_seconds > 0:
                await asyncio.sleep(delay_seconds)
            return await asyncio.to_thread(self.delete_named, area, file_name)
        except asyncio.CancelledError:
            logger.info("[janitor] delayed delete of %s/%s cancelled", area.value, file_name)
            raise
        except Exception as exc:
            logger.warning("[janitor] delayed delete of %s/%s failed: %s", area.value, file_name, exc)
            return False

    def schedule_delete(self, area: StorageArea, file_name: str, delay_seconds: Optional[float] = None) -> asyncio.Task:
        """호출한 요청은 이 작업을 기다리지 않는다. 실행 중인 이벤트 루프 안에서만 호출합니다."""
        delay = delay_seconds if delay_seconds is not None else settings.DOWNLOAD_DELETE_DELAY_SECONDS
        task = asyncio.get_running_loop().create_task(self.delete_later(area, file_name, delay))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task
