"""요청 처리 전에 마지막 정리 이후 SWEEP_INTERVAL_SECONDS가 지났으면 만료 파일 정리를 수행하는 HTTP 미들웨어입니다."""

import logging

from fastapi import Request
from fastapi.concurrency import run_in_threadpool

from app.dependencies import get_janitor

logger = logging.getLogger(__name__)

# 정리 API 자체와 결과 파일 서빙 경로는 트리거 대상에서 제외한다.
EXCLUDED_PREFIXES = ("/api/cleanup", "/api/resized", "/resized", "/uploads")


async def opportunistic_sweep(request: Request, call_next):
    if not request.url.path.startswith(EXCLUDED_PREFIXES):
        try:
            swept = await run_in_threadpool(get_janitor(request).maybe_sweep)
            if swept:
                logger.info("[janitor] scheduled cleanup completed before %s", request.url.path)
        except Exception as exc:
            logger.error("[janitor] failed to run scheduled cleanup: %s", exc)
    return await call_next(request)
