# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

from __future__ import annotations

import uuid
from contextvars import ContextVar

HEADER_AUDIT_ID = "Audit-ID"

_audit_id_ctx: ContextVar[str] = ContextVar("audit_id", default="-")


def new_audit_id() -> str:
    return uuid.uuid4().hex


def set_audit_id(audit_id: str) -> None:
    _audit_id_ctx.set(audit_id or "-")


def get_audit_id() -> str:
    return _audit_id_ctx.get() or "-"
