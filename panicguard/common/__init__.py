# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

"""通用基础设施（错误/日志/audit/运行时 等）

约定：
- 受控错误统一通过 AppError 抛出，由全局异常处理转为标准响应，不会触发 panic 恢复
- audit_id 通过 middleware 注入，写入日志与响应头，便于线上排障
- 失控异常由 runtime.RecoveryGuard 兜底，再交给 filters 里的 crash handler
"""

from __future__ import annotations
