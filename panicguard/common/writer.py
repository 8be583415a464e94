# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

"""ASGI 响应写入端

同一个请求上的各层 middleware 共用一份「待发送响应头」（挂在 scope 上），
任意一层在 http.response.start 之前写入的头都会随响应一起发出。
"""

from __future__ import annotations

from typing import Optional

from starlette.datastructures import MutableHeaders
from starlette.responses import PlainTextResponse
from starlette.types import Message, Scope, Send

_PENDING_HEADERS_KEY = "panicguard.response_headers"


def pending_headers(scope: Scope) -> MutableHeaders:
    headers = scope.get(_PENDING_HEADERS_KEY)
    if headers is None:
        headers = MutableHeaders()
        scope[_PENDING_HEADERS_KEY] = headers
    return headers


class ResponseWriter:
    def __init__(self, scope: Scope, send: Send) -> None:
        self._scope = scope
        self._send = send
        self.status_code: Optional[int] = None
        self.started = False

    @property
    def headers(self) -> MutableHeaders:
        return pending_headers(self._scope)

    async def send(self, message: Message) -> None:
        if message["type"] == "http.response.start":
            self.started = True
            self.status_code = int(message["status"])
            message = self._merge_headers(message)
        await self._send(message)

    async def error(self, text: str, status_code: int) -> None:
        """写一个纯文本错误响应，语义同 net/http 的 http.Error"""

        response = PlainTextResponse(
            text + "\n",
            status_code=status_code,
            headers={"X-Content-Type-Options": "nosniff"},
        )
        await self.send(
            {
                "type": "http.response.start",
                "status": response.status_code,
                "headers": response.raw_headers,
            }
        )
        await self.send({"type": "http.response.body", "body": response.body, "more_body": False})

    def _merge_headers(self, message: Message) -> Message:
        pending = self.headers.raw
        if not pending:
            return message

        raw = list(message.get("headers", []))
        present = {k.lower() for k, _ in raw}
        for key, value in pending:
            if key not in present:
                raw.append((key, value))
        return {**message, "headers": raw}
