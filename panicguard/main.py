# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse

from panicguard.common.errors import AppError
from panicguard.common.exception_handlers import app_error_handler, unhandled_error_handler, validation_error_handler
from panicguard.common.logging import setup_logging
from panicguard.common.middlewares import AuditIdMiddleware
from panicguard.common.runtime import ErrorReporter
from panicguard.domain.request_info import RequestInfoFactory, RequestInfoResolver
from panicguard.filters.panic_recovery import PanicRecoveryMiddleware
from panicguard.infra.config import settings
from panicguard.infra.metrics import RequestMetrics, request_metrics


def create_app(
    resolver: Optional[RequestInfoResolver] = None,
    metrics: Optional[RequestMetrics] = None,
    reporter: Optional[ErrorReporter] = None,
) -> FastAPI:
    setup_logging(settings.LOG_LEVEL)
    metrics = metrics if metrics is not None else request_metrics

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
    )

    # ---------- middlewares / handlers ----------

    # 后加的在外层：audit_id 必须先于 panic 恢复层写入
    app.add_middleware(
        PanicRecoveryMiddleware,
        resolver=resolver or RequestInfoFactory(),
        metrics=metrics,
        reporter=reporter,
    )
    app.add_middleware(AuditIdMiddleware)

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    @app.get("/health")
    def health_check() -> dict:
        return {"status": "ok"}

    @app.get("/metrics", response_class=PlainTextResponse)
    def metrics_endpoint() -> str:
        return metrics.render()

    return app


app = create_app()
