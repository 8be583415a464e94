# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

"""
领域层：

- request_info: 请求语义身份（verb / group / version / resource ...）及其解析
"""
from . import request_info  # noqa: F401

__all__ = ["request_info"]
