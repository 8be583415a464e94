# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

from __future__ import annotations

import logging
from typing import Union

from panicguard.common.audit import get_audit_id


class AuditIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        setattr(record, "audit_id", get_audit_id())
        return True


def setup_logging(level: Union[int, str] = logging.INFO) -> None:
    """初始化全局日志"""

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)

    if not root.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            "[%(asctime)s - %(levelname)s - audit=%(audit_id)s - %(name)s - %(message)s]",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)
        root.addHandler(handler)

    # 给现有 handler 全部加 filter
    for h in root.handlers:
        has_filter = any(isinstance(f, AuditIdFilter) for f in getattr(h, "filters", []))
        if not has_filter:
            h.addFilter(AuditIdFilter())
