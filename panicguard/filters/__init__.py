# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

"""
请求过滤层：

- panic_recovery: 失控异常的拦截、记录、分类与兜底响应
- httplog: 请求日志包装
- stack: 有界调用栈快照
- classify: abort / 普通失败分类
"""
from panicguard.filters.classify import FailureKind, classify  # noqa: F401
from panicguard.filters.panic_recovery import (  # noqa: F401
    PANIC_MESSAGE,
    PanicRecoveryMiddleware,
    handle_panic,
    with_panic_recovery,
)
from panicguard.filters.stack import MAX_STACK_BYTES, current_stack  # noqa: F401

__all__ = [
    "FailureKind",
    "classify",
    "PANIC_MESSAGE",
    "PanicRecoveryMiddleware",
    "handle_panic",
    "with_panic_recovery",
    "MAX_STACK_BYTES",
    "current_stack",
]
