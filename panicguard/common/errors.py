# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class AppError(Exception):
    """受控异常统一"""
    code: str
    message: str
    status_code: int = 400
    detail: Optional[Any] = None


class NotFoundError(AppError):
    def __init__(self, code: str = "NOT_FOUND", message: str = "not found", detail: Any = None) -> None:
        super().__init__(code=code, message=message, status_code=404, detail=detail)


class AbortHandler(Exception):
    """中止当前请求的哨兵异常

    handler 主动放弃本次请求（超时、客户端已断开等）时抛出。
    恢复层只记录 abort 指标并上报，不写任何响应，也不按服务端错误处理。
    """

    def __init__(self, message: str = "abort Handler") -> None:
        super().__init__(message)


class RequestInfoError(ValueError):
    """请求路径 / 参数无法解析为 RequestInfo"""
