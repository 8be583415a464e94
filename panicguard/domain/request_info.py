# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterable, Optional, Tuple

from starlette.requests import Request
from starlette.types import Scope

from panicguard.common.errors import RequestInfoError
from panicguard.infra.config import settings

_VERBS_BY_METHOD = {
    "POST": "create",
    "GET": "get",
    "HEAD": "get",
    "PUT": "update",
    "PATCH": "patch",
    "DELETE": "delete",
}

_TRUE_VALUES = {"1", "t", "true", "y", "yes"}
_FALSE_VALUES = {"", "0", "f", "false", "n", "no"}


@dataclass(frozen=True)
class RequestInfo:
    """请求的语义身份，只用于指标分类"""

    is_resource_request: bool
    path: str
    verb: str
    api_prefix: str = ""
    api_group: str = ""
    api_version: str = ""
    namespace: str = ""
    resource: str = ""
    subresource: str = ""
    name: str = ""
    parts: Tuple[str, ...] = field(default_factory=tuple)


class RequestInfoResolver(ABC):
    @abstractmethod
    def resolve(self, request: Request) -> RequestInfo:
        """解析失败时抛出 RequestInfoError"""
        raise NotImplementedError


def request_uri(scope: Scope) -> str:
    """原始请求行里的 URI（path + query），语义同 net/http 的 RequestURI"""

    raw_path = scope.get("raw_path")
    path = raw_path.decode("latin-1") if raw_path else scope.get("path", "")
    query = scope.get("query_string", b"")
    if query:
        return f"{path}?{query.decode('latin-1')}"
    return path


class RequestInfoFactory(RequestInfoResolver):
    """按 /<prefix>[/<group>]/<version>[/namespaces/<ns>]/<resource>[/<name>[/<subresource>]] 解析

    不匹配前缀或段数不够的路径按 non-resource 请求处理。
    """

    def __init__(
        self,
        api_prefixes: Optional[Iterable[str]] = None,
        groupless_api_prefixes: Optional[Iterable[str]] = None,
    ) -> None:
        self.api_prefixes = frozenset(settings.API_PREFIXES if api_prefixes is None else api_prefixes)
        self.groupless_api_prefixes = frozenset(
            settings.GROUPLESS_API_PREFIXES if groupless_api_prefixes is None else groupless_api_prefixes
        )

    def resolve(self, request: Request) -> RequestInfo:
        method = request.method.upper()
        path = request.url.path
        non_resource = RequestInfo(is_resource_request=False, path=path, verb=method.lower())

        trimmed = path.strip("/")
        parts = trimmed.split("/") if trimmed else []
        if len(parts) < 1 or parts[0] not in self.api_prefixes:
            return non_resource
        if any(not p for p in parts):
            raise RequestInfoError(f"empty path segment in {path!r}")

        prefix, rest = parts[0], parts[1:]
        group = ""
        if prefix not in self.groupless_api_prefixes:
            # /apis/<group>/<version>/<resource>
            if len(rest) < 3:
                return non_resource
            group, rest = rest[0], rest[1:]
        elif len(rest) < 2:
            return non_resource

        version, rest = rest[0], rest[1:]

        namespace = ""
        if rest[0] == "namespaces":
            if len(rest) > 1:
                namespace = rest[1]
                # /namespaces/<ns> 本身指向 namespace 对象
                if len(rest) > 2:
                    rest = rest[2:]

        resource = rest[0]
        name = rest[1] if len(rest) >= 2 else ""
        subresource = rest[2] if len(rest) >= 3 else ""

        verb = _VERBS_BY_METHOD.get(method, "")
        if not name:
            if verb == "get":
                verb = "watch" if self._is_watch(request) else "list"
            elif verb == "delete":
                verb = "deletecollection"

        return RequestInfo(
            is_resource_request=True,
            path=path,
            verb=verb,
            api_prefix=prefix,
            api_group=group,
            api_version=version,
            namespace=namespace,
            resource=resource,
            subresource=subresource,
            name=name,
            parts=tuple(rest),
        )

    @staticmethod
    def _is_watch(request: Request) -> bool:
        raw = request.query_params.get("watch")
        if raw is None:
            return False

        value = raw.strip().lower()
        if value in _TRUE_VALUES:
            return True
        if value in _FALSE_VALUES:
            return False
        raise RequestInfoError(f"invalid watch parameter: {raw!r}")
