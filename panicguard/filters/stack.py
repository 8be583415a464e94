# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

from __future__ import annotations

import sys
import traceback
from typing import List, Optional

MAX_STACK_BYTES = 50 * 1024


def current_stack(exc: Optional[BaseException] = None, limit: int = MAX_STACK_BYTES) -> str:
    """当前调用链的文本栈，以换行开头，最多 limit 字节

    传入正在处理的异常时，从捕获点接上异常自身的 traceback，得到的就是出错那一刻的调用链。
    只包含当前执行上下文（当前线程 / 当前 task），超长时保留最内层的帧。
    """

    try:
        entries = _format_frames(exc)
        text = _truncate(entries, limit)
    except Exception as e:  # noqa: BLE001
        text = f"<stack unavailable: {type(e).__name__}>\n"
    return "\n" + text


def _format_frames(exc: Optional[BaseException]) -> List[str]:
    tb = exc.__traceback__ if exc is not None else None
    if tb is not None:
        outer = tb.tb_frame.f_back
        frames = list(traceback.extract_stack(outer)) if outer is not None else []
        frames.extend(traceback.extract_tb(tb))
    else:
        # 跳过 current_stack 自己这两层
        frames = list(traceback.extract_stack(sys._getframe(2)))
    return traceback.format_list(frames)


def _truncate(entries: List[str], limit: int) -> str:
    if limit <= 0:
        return ""

    encoded = [e.encode("utf-8", errors="replace") for e in entries]
    total = sum(len(e) for e in encoded)
    if total <= limit:
        return b"".join(encoded).decode("utf-8")

    kept: List[bytes] = []
    size = 0
    for entry in reversed(encoded):
        if size + len(entry) > limit:
            break
        kept.append(entry)
        size += len(entry)

    dropped = len(encoded) - len(kept)
    marker = f"  ... {dropped} outer frames omitted ...\n".encode("utf-8")
    while kept and size + len(marker) > limit:
        size -= len(kept.pop())
        dropped += 1
        marker = f"  ... {dropped} outer frames omitted ...\n".encode("utf-8")

    if not kept:
        # 单帧就超限，只能按行截断最内层那一帧
        tail = encoded[-1][-limit:]
        newline = tail.find(b"\n")
        if 0 <= newline < len(tail) - 1:
            tail = tail[newline + 1:]
        return tail.decode("utf-8", errors="ignore")

    kept.reverse()
    return (marker + b"".join(kept)).decode("utf-8")
