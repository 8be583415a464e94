# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

from __future__ import annotations

from typing import List

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """全局配置，从 .env / 环境变量读取"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # 运行环境
    ENV: str = Field("dev", description="运行环境: dev / prod")

    PROJECT_NAME: str = Field(
        "panicguard",
        description="服务名",
        validation_alias=AliasChoices("PROJECT_NAME", "project_name"),
    )
    VERSION: str = Field(
        "1.0.0",
        description="服务版本",
        validation_alias=AliasChoices("VERSION", "version"),
    )

    LOG_LEVEL: str = Field(
        "INFO",
        description="日志级别: DEBUG / INFO / WARNING / ERROR",
        validation_alias=AliasChoices("LOG_LEVEL", "log_level"),
    )

    # 崩溃处理
    REALLY_CRASH: bool = Field(
        False,
        description="panic 处理完成后是否继续向上抛出（交给宿主 runtime 的兜底处理）",
        validation_alias=AliasChoices("REALLY_CRASH", "really_crash"),
    )
    ERROR_REPORT_MIN_INTERVAL_SECONDS: float = Field(
        1.0,
        description="相同错误上报的最小间隔（秒），间隔内重复上报会被丢弃",
        validation_alias=AliasChoices("ERROR_REPORT_MIN_INTERVAL_SECONDS", "error_report_min_interval_seconds"),
    )

    # 请求路径解析
    API_PREFIXES: List[str] = Field(
        default_factory=lambda: ["api", "apis"],
        description="资源请求的路径前缀",
        validation_alias=AliasChoices("API_PREFIXES", "api_prefixes"),
    )
    GROUPLESS_API_PREFIXES: List[str] = Field(
        default_factory=lambda: ["api"],
        description="不带 group 段的路径前缀（例如 /api/v1/...）",
        validation_alias=AliasChoices("GROUPLESS_API_PREFIXES", "groupless_api_prefixes"),
    )


settings = Settings()
