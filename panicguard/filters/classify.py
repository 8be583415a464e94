# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

from __future__ import annotations

from enum import Enum

from panicguard.common.errors import AbortHandler


class FailureKind(str, Enum):
    ABORT = "abort"
    GENERIC = "generic"


def classify(err: object) -> FailureKind:
    if isinstance(err, AbortHandler):
        return FailureKind.ABORT
    return FailureKind.GENERIC
