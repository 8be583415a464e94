# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

"""请求级 panic 恢复：失控异常只影响当前请求，记录、分类、上报后返回安全响应"""
