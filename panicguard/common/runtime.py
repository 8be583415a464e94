# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

"""进程级错误处理原语

- RecoveryGuard: 包住一次请求处理的作用域守卫，失控异常时调用回调，再按 really_crash 决定是否继续抛出
- ErrorReporter: 限频的错误上报出口，相同错误在间隔内只上报一次
"""

from __future__ import annotations

import logging
import threading
import time
from types import TracebackType
from typing import Awaitable, Callable, Dict, Iterable, List, Optional, Type, Union

from panicguard.infra.config import settings

logger = logging.getLogger(__name__)

CrashCallback = Callable[[Exception], Awaitable[None]]
ErrorCallback = Callable[[str], None]

# 限频记录超过这个数量时清理过期项
_MAX_TRACKED_ERRORS = 1024


class RecoveryGuard:
    """失控异常的作用域守卫

    正常退出时什么都不做；作用域内抛出 Exception 时，按顺序 await 每个回调一次，
    然后吞掉异常（really_crash=False）或原样继续抛出（really_crash=True）。
    任务取消 / KeyboardInterrupt / SystemExit 不属于请求失败，直接放行。
    """

    def __init__(self, *handlers: CrashCallback, really_crash: bool = False) -> None:
        self._handlers = handlers
        self._really_crash = really_crash

    async def __aenter__(self) -> "RecoveryGuard":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> bool:
        if exc is None or not isinstance(exc, Exception):
            return False

        for handler in self._handlers:
            await handler(exc)

        return not self._really_crash


class ErrorReporter:
    def __init__(
        self,
        min_interval: float = 1.0,
        *,
        really_crash: bool = False,
        handlers: Optional[Iterable[ErrorCallback]] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.min_interval = float(min_interval)
        self.really_crash = really_crash
        self._handlers: List[ErrorCallback] = list(handlers or [])
        self._clock = clock
        self._lock = threading.Lock()
        self._last_reported: Dict[str, float] = {}
        self._suppressed: Dict[str, int] = {}

    def handle_error(self, err: Union[str, BaseException]) -> bool:
        """上报一个无处可抛的错误，返回本次是否真正上报"""

        message = str(err)
        now = self._clock()

        with self._lock:
            last = self._last_reported.get(message)
            if last is not None and now - last < self.min_interval:
                self._suppressed[message] = self._suppressed.get(message, 0) + 1
                return False

            if len(self._last_reported) >= _MAX_TRACKED_ERRORS:
                self._prune(now)
            self._last_reported[message] = now
            suppressed = self._suppressed.pop(message, 0)

        if suppressed:
            logger.error("Unhandled Error: %s (suppressed %d identical reports)", message, suppressed)
        else:
            logger.error("Unhandled Error: %s", message)

        for handler in self._handlers:
            handler(message)
        return True

    def handle_crash(self, *handlers: CrashCallback) -> RecoveryGuard:
        return RecoveryGuard(*handlers, really_crash=self.really_crash)

    def _prune(self, now: float) -> None:
        expired = [m for m, ts in self._last_reported.items() if now - ts >= self.min_interval]
        for message in expired:
            self._last_reported.pop(message, None)
            self._suppressed.pop(message, None)

        # 全部仍在间隔内时，丢掉最旧的一半
        if len(self._last_reported) >= _MAX_TRACKED_ERRORS:
            ordered = sorted(self._last_reported.items(), key=lambda item: item[1])
            for message, _ in ordered[: len(ordered) // 2]:
                self._last_reported.pop(message, None)
                self._suppressed.pop(message, None)


def build_default_reporter() -> ErrorReporter:
    return ErrorReporter(
        settings.ERROR_REPORT_MIN_INTERVAL_SECONDS,
        really_crash=settings.REALLY_CRASH,
    )


error_reporter = build_default_reporter()
