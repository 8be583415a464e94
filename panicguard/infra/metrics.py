# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

"""请求级指标（进程内计数，/metrics 以文本格式暴露）"""

from __future__ import annotations

import threading
from typing import Dict, Optional, Tuple

from starlette.requests import Request

from panicguard.domain.request_info import RequestInfo

REQUEST_ABORTS_TOTAL = "apiserver_request_aborts_total"
ABORT_LABELS = ("verb", "group", "version", "resource", "subresource", "scope")

LabelValues = Tuple[str, str, str, str, str, str]


def clean_scope(info: RequestInfo) -> str:
    if info.name or info.verb == "create":
        return "resource"
    if info.namespace:
        return "namespace"
    if info.is_resource_request:
        return "cluster"
    return ""


def canonical_verb(method: str, scope: str, info: Optional[RequestInfo] = None) -> str:
    if info is not None and info.verb == "watch":
        return "WATCH"
    if method in ("GET", "HEAD"):
        if scope != "resource" and scope != "":
            return "LIST"
        return "GET"
    return method


class RequestMetrics:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._aborts: Dict[LabelValues, int] = {}

    def record_request_abort(self, request: Request, info: Optional[RequestInfo]) -> None:
        method = request.method.upper()
        if info is None:
            # 解析失败时仍按 query 识别 watch
            verb = "WATCH" if method in ("GET", "HEAD") and request.query_params.get("watch") == "true" else method
            labels: LabelValues = (verb, "", "", "", "", "")
        else:
            scope = clean_scope(info)
            labels = (
                canonical_verb(method, scope, info),
                info.api_group,
                info.api_version,
                info.resource,
                info.subresource,
                scope,
            )

        with self._lock:
            self._aborts[labels] = self._aborts.get(labels, 0) + 1

    def snapshot(self) -> Dict[LabelValues, int]:
        with self._lock:
            return dict(self._aborts)

    def render(self) -> str:
        lines = [
            f"# HELP {REQUEST_ABORTS_TOTAL} Number of requests which apiserver aborted possibly due to a timeout, for each group, version, verb, resource, subresource and scope",
            f"# TYPE {REQUEST_ABORTS_TOTAL} counter",
        ]
        for labels, count in sorted(self.snapshot().items()):
            pairs = ",".join(f'{k}="{v}"' for k, v in zip(ABORT_LABELS, labels))
            lines.append(f"{REQUEST_ABORTS_TOTAL}{{{pairs}}} {count}")
        return "\n".join(lines) + "\n"


request_metrics = RequestMetrics()
