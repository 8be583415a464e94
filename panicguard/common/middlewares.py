# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

from __future__ import annotations

from starlette.datastructures import Headers
from starlette.types import ASGIApp, Receive, Scope, Send

from panicguard.common.audit import HEADER_AUDIT_ID, new_audit_id, set_audit_id
from panicguard.common.writer import ResponseWriter


class AuditIdMiddleware:
    """给每个请求分配 audit_id：写入日志上下文和响应头

    需要放在 panic 恢复层外面，恢复层在 crash 时从响应头里读回 audit_id。
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        audit_id = Headers(scope=scope).get(HEADER_AUDIT_ID) or new_audit_id()
        set_audit_id(audit_id)

        writer = ResponseWriter(scope, send)
        writer.headers[HEADER_AUDIT_ID] = audit_id
        await self.app(scope, receive, writer.send)
